"""Subscription service - Checkout and customer portal sessions"""

import logging
from typing import Optional

from ...config import Settings
from ...errors import InvalidPriceId, MissingEmail, ProviderError, ValidationError
from ...models import Profile
from .dodo_service import DodoPaymentsService
from .schemas import CheckoutRequest, CheckoutResponse, PortalResponse

logger = logging.getLogger(__name__)


def derive_plan(price_id: Optional[str], settings: Settings) -> str:
    """Pro when the price matches the Pro plan, otherwise Starter"""
    if price_id and price_id == settings.pro_price_id:
        return "pro"
    return "starter"


class SubscriptionService:
    """Service layer for subscription purchase and management"""

    def __init__(self, settings: Settings, payments: DodoPaymentsService):
        self.settings = settings
        self.payments = payments

    async def create_checkout_session(
        self, body: CheckoutRequest, identity: Optional[dict] = None
    ) -> CheckoutResponse:
        """
        Start a hosted checkout for one of the two plans.

        A verified identity supplies the userId (and email when the token has
        one); without it the purchase continues as a guest checkout.
        """
        if not body.priceId:
            raise InvalidPriceId("Missing priceId")
        if body.priceId not in self.settings.known_price_ids:
            logger.warning(f"🚫 Checkout rejected for unknown priceId: {body.priceId}")
            raise InvalidPriceId("Invalid priceId")

        user_id = None
        email = body.email
        if identity:
            user_id = identity.get("sub") or identity.get("user_id")
            email = identity.get("email") or email
        if not email:
            raise MissingEmail("Email is required for checkout")

        metadata = {"priceId": body.priceId}
        if user_id:
            metadata["userId"] = user_id

        logger.info(
            f"🛒 Creating checkout session: price={body.priceId}, "
            f"user={user_id or 'guest'}, email={email}"
        )
        session = await self.payments.create_checkout_session(
            product_id=body.priceId,
            customer_email=email,
            return_url=f"{self.settings.base_url}/dashboard",
            metadata=metadata,
        )
        if not session.get("session_id"):
            raise ProviderError("Payments provider returned no checkout session")

        logger.info(f"✅ Checkout session created: {session['session_id']}")
        return CheckoutResponse(sessionId=session["session_id"], url=session.get("checkout_url"))

    async def create_portal_session(self, profile: Profile) -> PortalResponse:
        """Customer portal link for a subscribed profile"""
        if not profile.dodo_customer_id:
            raise ValidationError("No billing account found. Please subscribe to a plan first.")

        url = await self.payments.create_portal_session(profile.dodo_customer_id)
        if not url:
            raise ProviderError("Payments provider returned no portal link")

        logger.info(f"✅ Portal session created for profile {profile.id}")
        return PortalResponse(url=url)
