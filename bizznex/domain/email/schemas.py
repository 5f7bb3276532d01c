"""Email domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from ...shared.validators import require_text, validate_email

EmailType = Literal["custom", "invoice", "job_confirmation", "payment"]
EmailStatus = Literal["success", "sent", "failed"]


class SendEmailRequest(BaseModel):
    """Schema for sending an ad-hoc email"""

    to: str
    subject: str
    body: str = Field(validation_alias=AliasChoices("body", "message"))
    isHtml: bool = False
    emailType: EmailType = "custom"

    @field_validator("to")
    @classmethod
    def check_to(cls, v):
        return validate_email(require_text(v, "Recipient"))

    @field_validator("subject")
    @classmethod
    def check_subject(cls, v):
        return require_text(v, "Subject")


class EmailLogCreate(BaseModel):
    """Schema for saving a history entry directly"""

    to: str
    subject: str
    body: Optional[str] = None
    is_html: bool = False
    email_type: EmailType = "custom"
    status: EmailStatus = "sent"
    error: Optional[str] = None

    @field_validator("to")
    @classmethod
    def check_to(cls, v):
        return require_text(v, "Recipient")

    @field_validator("subject")
    @classmethod
    def check_subject(cls, v):
        return require_text(v, "Subject")


class EmailLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    to: str
    subject: str
    body: Optional[str] = None
    is_html: bool = False
    email_type: Optional[str] = None
    status: str
    error: Optional[str] = None
    sent_at: Optional[datetime] = None


class EmailResult(BaseModel):
    """Outcome of a single send attempt"""

    success: bool
    error: Optional[str] = None
    provider_id: Optional[str] = None
    log_id: Optional[int] = None
