"""Client service - Business logic for client operations"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...errors import NotFoundError, PersistenceError, ValidationError
from ...models import Client
from .repository import ClientRepository
from .schemas import ClientCreate, ClientResponse, ClientUpdate

logger = logging.getLogger(__name__)


class ClientService:
    """Service layer for client business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ClientRepository()

    def to_response(self, client: Client, stats: dict | None = None) -> ClientResponse:
        if stats is None:
            stats = self.repo.get_client_stats(self.db, [client.id])[client.id]
        response = ClientResponse.model_validate(client)
        return response.model_copy(update=stats)

    def get_clients(self) -> list[ClientResponse]:
        """Get all clients with their derived job and spend figures"""
        clients = self.repo.get_clients(self.db)
        stats = self.repo.get_client_stats(self.db, [c.id for c in clients])
        return [self.to_response(c, stats[c.id]) for c in clients]

    def get_client(self, client_id: int) -> Client:
        client = self.repo.get_client_by_id(self.db, client_id)
        if not client:
            raise NotFoundError("Client not found")
        return client

    def create_client(self, data: ClientCreate) -> Client:
        logger.info(f"📥 Creating client: {data.name} ({data.type})")
        try:
            return self.repo.create_client(self.db, **data.model_dump())
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to create client {data.name}: {e}")
            raise PersistenceError("Failed to create client") from e

    def update_client(self, client_id: int, data: ClientUpdate) -> Client:
        client = self.get_client(client_id)
        updates = data.model_dump(exclude_unset=True)
        if "name" in updates and updates["name"] is None:
            raise ValidationError("Client name is required")
        try:
            return self.repo.update_client(self.db, client, **updates)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to update client {client_id}: {e}")
            raise PersistenceError("Failed to update client") from e

    def delete_client(self, client_id: int) -> None:
        client = self.get_client(client_id)
        try:
            self.repo.delete_client(self.db, client)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to delete client {client_id}: {e}")
            raise PersistenceError("Failed to delete client") from e
        logger.info(f"🗑️ Deleted client {client_id} with its jobs and invoices")
