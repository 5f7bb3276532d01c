"""Billing router - Checkout, customer portal and payment webhooks"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ...auth import get_current_profile, get_optional_identity
from ...config import Settings
from ...database import get_db, get_settings
from ...errors import BizznexError
from ...models import Profile
from ...webhook_security import WebhookSignatureError, verify_webhook_signature
from .dodo_service import DodoPaymentsService
from .schemas import CheckoutRequest, CheckoutResponse, PortalResponse, WebhookAck
from .subscription_service import SubscriptionService
from .webhook_service import WebhookService, parse_event

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Billing"])


def get_payments_provider(request: Request) -> DodoPaymentsService:
    return request.app.state.payments


def get_subscription_service(
    settings: Settings = Depends(get_settings),
    payments: DodoPaymentsService = Depends(get_payments_provider),
) -> SubscriptionService:
    """Dependency injection for SubscriptionService"""
    return SubscriptionService(settings, payments)


# ============================================================================
# SUBSCRIPTION MANAGEMENT
# ============================================================================


@router.post("/create-checkout-session", response_model=CheckoutResponse)
async def create_checkout_session(
    body: CheckoutRequest,
    identity: Optional[dict] = Depends(get_optional_identity),
    service: SubscriptionService = Depends(get_subscription_service),
):
    """Create a checkout session; signed-in and guest purchases are both allowed"""
    return await service.create_checkout_session(body, identity)


@router.post("/create-portal-session", response_model=PortalResponse)
async def create_portal_session(
    profile: Profile = Depends(get_current_profile),
    service: SubscriptionService = Depends(get_subscription_service),
):
    """Create a customer portal session for the signed-in subscriber"""
    return await service.create_portal_session(profile)


# ============================================================================
# WEBHOOKS
# ============================================================================


@router.post("/webhooks/payments", response_model=WebhookAck)
@router.post("/webhooks/stripe", response_model=WebhookAck, include_in_schema=False)
async def handle_payments_webhook(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Verify signature and apply subscription lifecycle events.

    Headers:
      - 'webhook-signature': 'v1,{base64(hmac_sha256(webhook-id.webhook-timestamp.payload))}'
      - 'webhook-id': Unique webhook ID
      - 'webhook-timestamp': Unix timestamp (seconds)
    """
    raw_body = await request.body()

    try:
        webhook_id = verify_webhook_signature(
            raw_body, request.headers, settings.dodo_payments_webhook_secret
        )
    except WebhookSignatureError as e:
        logger.warning(f"🚫 Rejected webhook: {e}")
        return JSONResponse(status_code=400, content={"success": False, "message": str(e)})

    event = parse_event(raw_body)

    try:
        outcome = WebhookService(db, settings).handle_event(event)
    except Exception as e:
        db.rollback()
        message = e.message if isinstance(e, BizznexError) else "Webhook handler failed"
        logger.exception(f"❌ Webhook {webhook_id} ({event.get('type')}) failed: {message}")
        return JSONResponse(status_code=500, content={"success": False, "message": message})

    logger.info(f"✅ Webhook {webhook_id} {outcome}")
    return WebhookAck()
