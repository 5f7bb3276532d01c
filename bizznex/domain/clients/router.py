"""Client router - FastAPI endpoints for client operations"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_profile
from ...database import get_db
from ...shared.responses import ApiResponse, MessageResponse
from .schemas import ClientCreate, ClientResponse, ClientUpdate
from .service import ClientService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/clients", tags=["Clients"], dependencies=[Depends(get_current_profile)]
)


def get_client_service(db: Session = Depends(get_db)) -> ClientService:
    """Dependency injection for ClientService"""
    return ClientService(db)


@router.get("", response_model=ApiResponse[list[ClientResponse]])
async def get_clients(service: ClientService = Depends(get_client_service)):
    """Get all clients sorted by name"""
    return ApiResponse(data=service.get_clients())


@router.get("/{client_id}", response_model=ApiResponse[ClientResponse])
async def get_client(client_id: int, service: ClientService = Depends(get_client_service)):
    client = service.get_client(client_id)
    return ApiResponse(data=service.to_response(client))


@router.post("", response_model=ApiResponse[ClientResponse], status_code=201)
async def create_client(data: ClientCreate, service: ClientService = Depends(get_client_service)):
    client = service.create_client(data)
    return ApiResponse(data=service.to_response(client))


@router.put("/{client_id}", response_model=ApiResponse[ClientResponse])
async def update_client(
    client_id: int,
    data: ClientUpdate,
    service: ClientService = Depends(get_client_service),
):
    client = service.update_client(client_id, data)
    return ApiResponse(data=service.to_response(client))


@router.delete("/{client_id}", response_model=MessageResponse)
async def delete_client(client_id: int, service: ClientService = Depends(get_client_service)):
    """Delete a client; its jobs and invoices go with it"""
    service.delete_client(client_id)
    return MessageResponse(message="Client deleted successfully")
