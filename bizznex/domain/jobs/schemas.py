"""Job domain schemas - Pydantic models for validation"""

import datetime as dt
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...shared.validators import require_text

JobStatus = Literal["Scheduled", "InProgress", "Completed", "Cancelled"]
RecurringType = Literal["none", "weekly", "biweekly", "monthly"]


class JobCreate(BaseModel):
    """Schema for creating a new job"""

    client_id: int
    service: str
    date: dt.date
    time_slot: Optional[str] = None
    status: JobStatus = "Scheduled"
    total_amount: float = Field(default=0, ge=0)
    recurring_type: RecurringType = "none"
    recurring_day: Optional[int] = Field(default=None, ge=1, le=31)
    notes: Optional[str] = None

    @field_validator("service")
    @classmethod
    def validate_service(cls, v):
        return require_text(v, "Service")


class JobUpdate(BaseModel):
    """Schema for updating a job - only provided fields change"""

    client_id: Optional[int] = None
    service: Optional[str] = None
    date: Optional[dt.date] = None
    time_slot: Optional[str] = None
    status: Optional[JobStatus] = None
    total_amount: Optional[float] = Field(default=None, ge=0)
    recurring_type: Optional[RecurringType] = None
    recurring_day: Optional[int] = Field(default=None, ge=1, le=31)
    notes: Optional[str] = None

    @field_validator("service")
    @classmethod
    def validate_service(cls, v):
        if v is None:
            return v
        return require_text(v, "Service")


class JobResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    client_id: int
    client_name: str = "Unknown Client"
    address: Optional[str] = None
    service: str
    date: dt.date
    time_slot: Optional[str] = None
    status: str
    total_amount: float = 0
    recurring_type: str = "none"
    recurring_day: Optional[int] = None
    notes: Optional[str] = None
    # Set when completing this job scheduled its next occurrence
    next_job_id: Optional[int] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None


class JobConfirmRequest(BaseModel):
    """Recipient for a job confirmation; defaults to the client's address"""

    email: Optional[str] = None
