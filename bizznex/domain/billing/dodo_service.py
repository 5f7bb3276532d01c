"""Dodo Payments service - Integration with Dodo Payments API"""

import logging
from typing import Any, Optional

from dodopayments import APIError, AsyncDodoPayments

from ...config import Settings
from ...errors import ProviderError

logger = logging.getLogger(__name__)


def normalize_dodo_environment(env: Optional[str]) -> str:
    """Normalize Dodo environment value to expected format"""
    value = (env or "test_mode").strip().lower()
    if value in {"live", "production", "prod"}:
        return "live_mode"
    if value in {"test", "sandbox", "staging", "dev", "development"}:
        return "test_mode"
    if value in {"test_mode", "live_mode"}:
        return value
    logger.warning(f"Unknown DODO environment '{env}', defaulting to test_mode")
    return "test_mode"


def _field(response: Any, name: str) -> Any:
    """Read a field from an SDK model or a plain dict response"""
    if isinstance(response, dict):
        return response.get(name)
    return getattr(response, name, None)


class DodoPaymentsService:
    """Service for Dodo Payments API operations"""

    def __init__(self, settings: Settings):
        self.api_key = settings.dodo_payments_api_key
        self.environment = normalize_dodo_environment(settings.dodo_payments_environment)
        self.client = None

        if not self.api_key:
            logger.warning(
                "DODO_PAYMENTS_API_KEY not set; billing endpoints will fail until configured"
            )
        else:
            self.client = AsyncDodoPayments(bearer_token=self.api_key, environment=self.environment)
            logger.info(f"Dodo Payments client initialized (env={self.environment})")

    def is_available(self) -> bool:
        """Check if Dodo Payments client is available"""
        return self.client is not None

    def _require_client(self) -> AsyncDodoPayments:
        if not self.client:
            raise ProviderError("Payments provider not configured", status_code=503)
        return self.client

    async def create_checkout_session(
        self,
        product_id: str,
        customer_email: str,
        return_url: str,
        metadata: Optional[dict] = None,
        quantity: int = 1,
    ) -> dict:
        """Create a hosted checkout session; returns its id and redirect URL"""
        client = self._require_client()
        try:
            response = await client.checkout_sessions.create(
                product_cart=[{"product_id": product_id, "quantity": quantity}],
                customer={"email": customer_email},
                return_url=return_url,
                metadata=metadata or {},
            )
        except APIError as e:
            logger.error(f"Failed to create checkout session for {product_id}: {e}")
            raise ProviderError("Failed to create checkout session") from e

        return {
            "session_id": _field(response, "session_id"),
            "checkout_url": _field(response, "checkout_url"),
        }

    async def create_portal_session(self, customer_id: str) -> str:
        """Create a customer portal session and return its link"""
        client = self._require_client()
        try:
            response = await client.customers.customer_portal.create(customer_id=customer_id)
        except APIError as e:
            logger.error(f"Failed to create portal session for customer {customer_id}: {e}")
            raise ProviderError("Failed to create portal session") from e
        return _field(response, "link")
