"""Job repository - Database operations for jobs"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Client, Job


class JobRepository:
    """Repository for job database operations"""

    @staticmethod
    def get_jobs(
        db: Session, client_id: Optional[int] = None, status: Optional[str] = None
    ) -> list[Job]:
        """Get jobs, newest date first, optionally filtered by client and status"""
        query = db.query(Job).options(joinedload(Job.client))
        if client_id is not None:
            query = query.filter(Job.client_id == client_id)
        if status:
            query = query.filter(Job.status == status)
        return query.order_by(Job.date.desc(), Job.id.desc()).all()

    @staticmethod
    def get_job_by_id(db: Session, job_id: int) -> Optional[Job]:
        return db.query(Job).options(joinedload(Job.client)).filter(Job.id == job_id).first()

    @staticmethod
    def get_client_by_id(db: Session, client_id: int) -> Optional[Client]:
        return db.query(Client).filter(Client.id == client_id).first()

    @staticmethod
    def create_job(db: Session, **job_data) -> Job:
        job = Job(**job_data)
        db.add(job)
        db.commit()
        db.refresh(job)
        return job

    @staticmethod
    def update_job(db: Session, job: Job, next_job: Optional[Job] = None, **updates) -> Job:
        """Apply updates and, for a completed recurring job, add its next occurrence"""
        for key, value in updates.items():
            if hasattr(job, key):
                setattr(job, key, value)
        if next_job is not None:
            db.add(next_job)

        db.commit()
        db.refresh(job)
        if next_job is not None:
            db.refresh(next_job)
        return job

    @staticmethod
    def delete_job(db: Session, job: Job) -> None:
        db.delete(job)
        db.commit()
