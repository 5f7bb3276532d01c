"""Client repository - Database operations for clients"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Client, Job
from ...models_invoice import Invoice

ACTIVE_JOB_STATUSES = ("Scheduled", "InProgress")


class ClientRepository:
    """Repository for client database operations"""

    @staticmethod
    def get_clients(db: Session) -> list[Client]:
        """Get all clients sorted by name"""
        return db.query(Client).order_by(Client.name.asc()).all()

    @staticmethod
    def get_client_by_id(db: Session, client_id: int) -> Optional[Client]:
        return db.query(Client).filter(Client.id == client_id).first()

    @staticmethod
    def create_client(db: Session, **client_data) -> Client:
        client = Client(**client_data)
        db.add(client)
        db.commit()
        db.refresh(client)
        return client

    @staticmethod
    def update_client(db: Session, client: Client, **updates) -> Client:
        """Update a client with provided fields"""
        for key, value in updates.items():
            if hasattr(client, key):
                setattr(client, key, value)

        db.commit()
        db.refresh(client)
        return client

    @staticmethod
    def delete_client(db: Session, client: Client) -> None:
        """Delete a client along with its jobs and invoices"""
        db.delete(client)
        db.commit()

    @staticmethod
    def get_client_stats(db: Session, client_ids: list[int]) -> dict[int, dict]:
        """
        Derived figures per client: active job count, total paid across invoices
        and the date of the most recent completed job.
        """
        stats = {
            cid: {"active_jobs": 0, "total_spent": 0.0, "last_service": None}
            for cid in client_ids
        }
        if not client_ids:
            return stats

        active_rows = (
            db.query(Job.client_id, func.count(Job.id))
            .filter(Job.client_id.in_(client_ids), Job.status.in_(ACTIVE_JOB_STATUSES))
            .group_by(Job.client_id)
            .all()
        )
        for client_id, count in active_rows:
            stats[client_id]["active_jobs"] = count

        spent_rows = (
            db.query(Invoice.client_id, func.coalesce(func.sum(Invoice.amount_paid), 0))
            .filter(Invoice.client_id.in_(client_ids))
            .group_by(Invoice.client_id)
            .all()
        )
        for client_id, total in spent_rows:
            stats[client_id]["total_spent"] = round(float(total), 2)

        service_rows = (
            db.query(Job.client_id, func.max(Job.date))
            .filter(Job.client_id.in_(client_ids), Job.status == "Completed")
            .group_by(Job.client_id)
            .all()
        )
        for client_id, last_date in service_rows:
            stats[client_id]["last_service"] = last_date

        return stats
