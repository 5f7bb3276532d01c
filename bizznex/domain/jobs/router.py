"""Job router - FastAPI endpoints for job scheduling"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_profile
from ...config import Settings
from ...database import get_db, get_settings
from ...email_service import EmailService, delivery_error
from ...errors import ValidationError
from ...models import Profile
from ...shared.responses import ApiResponse, MessageResponse
from ..email.schemas import EmailResult
from .schemas import JobConfirmRequest, JobCreate, JobResponse, JobStatus, JobUpdate
from .service import JobService, build_job_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/jobs", tags=["Jobs"])


def get_job_service(db: Session = Depends(get_db)) -> JobService:
    """Dependency injection for JobService"""
    return JobService(db)


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("", response_model=ApiResponse[list[JobResponse]])
async def get_jobs(
    client_id: Optional[int] = Query(None, description="Filter jobs by client ID"),
    status: Optional[JobStatus] = Query(None, description="Filter jobs by status"),
    _profile: Profile = Depends(get_current_profile),
    service: JobService = Depends(get_job_service),
):
    """Get jobs sorted by date, newest first"""
    jobs = service.get_jobs(client_id, status)
    return ApiResponse(data=[build_job_response(job) for job in jobs])


@router.get("/{job_id}", response_model=ApiResponse[JobResponse])
async def get_job(
    job_id: int,
    _profile: Profile = Depends(get_current_profile),
    service: JobService = Depends(get_job_service),
):
    return ApiResponse(data=build_job_response(service.get_job(job_id)))


@router.post("", response_model=ApiResponse[JobResponse], status_code=201)
async def create_job(
    data: JobCreate,
    _profile: Profile = Depends(get_current_profile),
    service: JobService = Depends(get_job_service),
):
    job = service.create_job(data)
    return ApiResponse(data=build_job_response(job))


@router.put("/{job_id}", response_model=ApiResponse[JobResponse])
async def update_job(
    job_id: int,
    data: JobUpdate,
    _profile: Profile = Depends(get_current_profile),
    service: JobService = Depends(get_job_service),
):
    """Update a job; completing a recurring job schedules the next one"""
    job, next_job = service.update_job(job_id, data)
    return ApiResponse(data=build_job_response(job, next_job))


@router.delete("/{job_id}", response_model=MessageResponse)
async def delete_job(
    job_id: int,
    _profile: Profile = Depends(get_current_profile),
    service: JobService = Depends(get_job_service),
):
    service.delete_job(job_id)
    return MessageResponse(message="Job deleted successfully")


# ============================================================================
# NOTIFICATIONS
# ============================================================================


@router.post("/{job_id}/confirm", response_model=ApiResponse[EmailResult])
async def send_job_confirmation(
    job_id: int,
    data: JobConfirmRequest,
    profile: Profile = Depends(get_current_profile),
    service: JobService = Depends(get_job_service),
    settings: Settings = Depends(get_settings),
):
    """Email a booking confirmation for a job"""
    job = service.get_job(job_id)
    recipient = data.email or (job.client.email if job.client else None)
    if not recipient:
        raise ValidationError("Client email is required")

    email_service = EmailService(settings, service.db)
    result = email_service.send_job_confirmation(
        job, recipient, business_name=profile.company or "Bizznex"
    )
    if not result.success:
        logger.error(f"❌ Job confirmation for job {job_id} failed: {result.error}")
        raise delivery_error(result, "send job confirmation email")
    return ApiResponse(data=result)
