"""Billing domain schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_email


class CheckoutRequest(BaseModel):
    """Schema for creating a checkout session"""

    priceId: Optional[str] = None
    email: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)


class CheckoutResponse(BaseModel):
    sessionId: str
    url: Optional[str] = None


class PortalResponse(BaseModel):
    url: str


class WebhookAck(BaseModel):
    received: bool = True
