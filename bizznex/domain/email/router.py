"""Email router - Send email and manage the send history"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_profile
from ...config import Settings
from ...database import get_db, get_settings
from ...email_service import EmailService, delivery_error
from ...shared.responses import ApiResponse, MessageResponse
from .schemas import EmailLogCreate, EmailLogResponse, EmailResult, SendEmailRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Email"], dependencies=[Depends(get_current_profile)])


def get_email_service(
    db: Session = Depends(get_db), settings: Settings = Depends(get_settings)
) -> EmailService:
    """Dependency injection for EmailService"""
    return EmailService(settings, db)


@router.post("/send-email", response_model=ApiResponse[EmailResult])
async def send_email(data: SendEmailRequest, service: EmailService = Depends(get_email_service)):
    """Send an ad-hoc email; the attempt is logged either way"""
    result = service.send_email(
        data.to,
        data.subject,
        data.body,
        is_html=data.isHtml,
        email_type=data.emailType,
    )
    if not result.success:
        raise delivery_error(result, "send email")
    return ApiResponse(data=result)


@router.get("/emails", response_model=ApiResponse[list[EmailLogResponse]])
async def get_emails(service: EmailService = Depends(get_email_service)):
    """Get email history, newest first"""
    logs = service.list_history()
    return ApiResponse(data=[EmailLogResponse.model_validate(log) for log in logs])


@router.post("/emails", response_model=ApiResponse[EmailLogResponse], status_code=201)
async def save_email(data: EmailLogCreate, service: EmailService = Depends(get_email_service)):
    log = service.record_history(data)
    return ApiResponse(data=EmailLogResponse.model_validate(log))


@router.delete("/emails/{log_id}", response_model=MessageResponse)
async def delete_email(log_id: int, service: EmailService = Depends(get_email_service)):
    service.delete_history(log_id)
    return MessageResponse(message="Email deleted successfully")
