"""Webhook service - Keep profile subscription state in sync with payment events"""

import json
import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...config import Settings
from ...errors import ProfileNotFound, ValidationError
from .repository import BillingRepository
from .subscription_service import derive_plan

logger = logging.getLogger(__name__)

ACTIVATION_EVENTS = ("checkout.session.completed", "subscription.active")
UPDATE_EVENTS = (
    "customer.subscription.updated",
    "subscription.updated",
    "subscription.plan_changed",
)
CANCELLATION_EVENTS = ("customer.subscription.deleted", "subscription.cancelled")


def parse_event(raw_body: bytes) -> dict:
    """Decode a webhook body; raises ValidationError for anything but a JSON object"""
    try:
        event = json.loads(raw_body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error(f"Failed to parse webhook JSON: {e}")
        raise ValidationError("Invalid JSON payload") from e
    if not isinstance(event, dict):
        raise ValidationError("Invalid JSON payload")
    return event


def _event_object(event: dict) -> dict:
    """The event's subject: ``data.object`` when wrapped, else ``data``"""
    data = event.get("data") or {}
    return data.get("object") or data


def _customer_id(obj: dict) -> Optional[str]:
    customer = obj.get("customer")
    if isinstance(customer, dict):
        return customer.get("customer_id") or customer.get("id")
    return customer or obj.get("customer_id")


def _subscription_id(obj: dict, is_subscription_object: bool) -> Optional[str]:
    subscription_id = obj.get("subscription_id") or obj.get("subscription")
    if not subscription_id and is_subscription_object:
        subscription_id = obj.get("id")
    return subscription_id


def _price_id(obj: dict) -> Optional[str]:
    """Current price of a subscription, from metadata, product id or line items"""
    metadata = obj.get("metadata") or {}
    if metadata.get("priceId"):
        return metadata["priceId"]
    if obj.get("product_id"):
        return obj["product_id"]
    items = (obj.get("items") or {}).get("data") or []
    if items:
        return (items[0].get("price") or {}).get("id")
    return None


class WebhookService:
    """Applies payment-provider events to profiles"""

    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings
        self.repo = BillingRepository()

    def handle_event(self, event: dict) -> str:
        """
        Dispatch an event by type. Returns "processed" or "ignored".

        Every handler sets fields to absolute values, so replays converge.
        """
        event_type = event.get("type")
        obj = _event_object(event)
        logger.info(f"🔔 Webhook event type={event_type}")

        if event_type in ACTIVATION_EVENTS:
            self._activate(obj, event_type)
        elif event_type in UPDATE_EVENTS:
            self._update(obj)
        elif event_type in CANCELLATION_EVENTS:
            self._cancel(obj)
        else:
            logger.info(f"Ignoring unhandled webhook event type: {event_type}")
            return "ignored"
        return "processed"

    def _activate(self, obj: dict, event_type: str) -> None:
        metadata = obj.get("metadata") or {}
        user_id = metadata.get("userId")
        if not user_id:
            raise ValidationError("Missing userId in checkout metadata")

        profile = self.repo.get_profile_by_id(self.db, user_id)
        if not profile:
            raise ProfileNotFound(f"Profile not found for userId {user_id}")

        plan = derive_plan(_price_id(obj), self.settings)
        self.repo.update_subscription(
            self.db,
            profile,
            dodo_customer_id=_customer_id(obj),
            dodo_subscription_id=_subscription_id(
                obj, is_subscription_object=event_type.startswith("subscription.")
            ),
            subscription_status="active",
            plan=plan,
        )
        logger.info(f"✅ Activated {plan} plan for profile {profile.id}")

    def _update(self, obj: dict) -> None:
        subscription_id = _subscription_id(obj, is_subscription_object=True)
        profile = (
            self.repo.get_profile_by_subscription_id(self.db, subscription_id)
            if subscription_id
            else None
        )
        if not profile:
            raise ProfileNotFound(f"No profile found for subscription {subscription_id}")

        fields = {"subscription_status": obj.get("status") or profile.subscription_status}
        price_id = _price_id(obj)
        if price_id:
            fields["plan"] = derive_plan(price_id, self.settings)

        self.repo.update_subscription(self.db, profile, **fields)
        logger.info(
            f"🔄 Subscription {subscription_id} for profile {profile.id} is now "
            f"{profile.subscription_status} ({profile.plan})"
        )

    def _cancel(self, obj: dict) -> None:
        subscription_id = _subscription_id(obj, is_subscription_object=True)
        profile = (
            self.repo.get_profile_by_subscription_id(self.db, subscription_id)
            if subscription_id
            else None
        )
        if not profile:
            logger.warning(f"⚠️ No profile found for cancelled subscription {subscription_id}")
            return

        self.repo.update_subscription(
            self.db, profile, subscription_status="canceled", plan=None
        )
        logger.info(f"🚫 Subscription {subscription_id} cancelled for profile {profile.id}")
