"""Job service - Business logic for job scheduling"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...errors import NotFoundError, PersistenceError, ValidationError
from ...models import Job
from .recurrence import next_occurrence_date
from .repository import JobRepository
from .schemas import JobCreate, JobResponse, JobUpdate

logger = logging.getLogger(__name__)


def build_job_response(job: Job, next_job: Optional[Job] = None) -> JobResponse:
    response = JobResponse.model_validate(job)
    updates = {"next_job_id": next_job.id if next_job else None}
    if job.client is not None:
        updates["client_name"] = job.client.name
        updates["address"] = job.client.address
    return response.model_copy(update=updates)


class JobService:
    """Service layer for job business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = JobRepository()

    def get_jobs(
        self, client_id: Optional[int] = None, status: Optional[str] = None
    ) -> list[Job]:
        return self.repo.get_jobs(self.db, client_id, status)

    def get_job(self, job_id: int) -> Job:
        job = self.repo.get_job_by_id(self.db, job_id)
        if not job:
            raise NotFoundError("Job not found")
        return job

    def _require_client(self, client_id: int):
        client = self.repo.get_client_by_id(self.db, client_id)
        if not client:
            raise NotFoundError("Client not found")
        return client

    def create_job(self, data: JobCreate) -> Job:
        self._require_client(data.client_id)
        logger.info(f"📅 Creating job '{data.service}' for client {data.client_id} on {data.date}")
        try:
            return self.repo.create_job(self.db, **data.model_dump())
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to create job for client {data.client_id}: {e}")
            raise PersistenceError("Failed to create job") from e

    def update_job(self, job_id: int, data: JobUpdate) -> tuple[Job, Optional[Job]]:
        """
        Partially update a job.

        When the job moves to Completed from any other status and it recurs,
        the next occurrence is scheduled in the same commit and returned.
        """
        job = self.get_job(job_id)
        updates = data.model_dump(exclude_unset=True)

        if updates.get("client_id") is not None:
            self._require_client(updates["client_id"])
        for required in ("service", "date", "status", "recurring_type", "client_id"):
            if required in updates and updates[required] is None:
                raise ValidationError(f"{required} cannot be empty")

        next_job = None
        if job.status != "Completed" and updates.get("status") == "Completed":
            recurring_type = updates.get("recurring_type", job.recurring_type)
            recurring_day = updates.get("recurring_day", job.recurring_day)
            job_date = updates.get("date", job.date)
            next_date = next_occurrence_date(job_date, recurring_type, recurring_day)
            if next_date:
                next_job = Job(
                    client_id=updates.get("client_id", job.client_id),
                    service=updates.get("service", job.service),
                    date=next_date,
                    time_slot=updates.get("time_slot", job.time_slot),
                    status="Scheduled",
                    total_amount=updates.get("total_amount", job.total_amount),
                    recurring_type=recurring_type,
                    recurring_day=recurring_day,
                    notes=updates.get("notes", job.notes),
                )

        try:
            job = self.repo.update_job(self.db, job, next_job=next_job, **updates)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to update job {job_id}: {e}")
            raise PersistenceError("Failed to update job") from e

        if next_job is not None:
            logger.info(
                f"🔁 Job {job_id} completed, scheduled next {job.recurring_type} "
                f"occurrence {next_job.id} on {next_job.date}"
            )
        return job, next_job

    def delete_job(self, job_id: int) -> None:
        job = self.get_job(job_id)
        try:
            self.repo.delete_job(self.db, job)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to delete job {job_id}: {e}")
            raise PersistenceError("Failed to delete job") from e
        logger.info(f"🗑️ Deleted job {job_id}")
