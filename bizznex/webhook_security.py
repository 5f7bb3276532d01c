"""
Webhook Security Module

Signature verification for payments-provider webhooks (Standard Webhooks format):
- Signed message is ``webhook-id.webhook-timestamp.payload``
- HMAC-SHA256 keyed with the base64-decoded part of a ``whsec_`` secret
- Constant-time comparison against every ``v1,`` signature in the header
- Timestamp tolerance to reject replays of stale deliveries
"""

import base64
import binascii
import hashlib
import hmac
import logging
import time
from collections.abc import Mapping
from typing import Optional

logger = logging.getLogger(__name__)

# Maximum age of webhook in seconds (5 minutes)
MAX_WEBHOOK_AGE_SECONDS = 300


class WebhookSignatureError(Exception):
    """Raised when webhook signature verification fails"""

    pass


def constant_time_compare(a: str, b: str) -> bool:
    if not a or not b:
        return False
    return hmac.compare_digest(a, b)


def extract_signing_key(secret: str) -> bytes:
    """
    Signing key bytes from a ``whsec_BASE64KEY`` style secret.

    Unprefixed secrets are base64-decoded when possible, otherwise used as raw UTF-8.
    """
    try:
        if secret.startswith("whsec_"):
            return base64.b64decode(secret[6:])
        return base64.b64decode(secret, validate=True)
    except (binascii.Error, ValueError):
        return secret.encode("utf-8")


def compute_signature(secret: str, webhook_id: str, timestamp: str, payload: bytes) -> str:
    signed_message = b".".join([webhook_id.encode("utf-8"), timestamp.encode("utf-8"), payload])
    digest = hmac.new(extract_signing_key(secret), signed_message, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("utf-8")


def verify_timestamp(
    timestamp: Optional[str], max_age: int = MAX_WEBHOOK_AGE_SECONDS, now: Optional[float] = None
) -> bool:
    if not timestamp:
        return False

    try:
        webhook_time = int(timestamp)
    except (ValueError, TypeError):
        logger.warning(f"🚫 Invalid webhook timestamp format: {timestamp}")
        return False

    age = abs(int(now if now is not None else time.time()) - webhook_time)
    if age > max_age:
        logger.warning(f"🚫 Webhook timestamp too old: {age}s (max: {max_age}s)")
        return False
    return True


def verify_webhook_signature(
    raw_body: bytes,
    headers: Mapping[str, str],
    secret: Optional[str],
    now: Optional[float] = None,
) -> str:
    """
    Verify a webhook delivery and return its webhook id.

    Raises WebhookSignatureError on any missing header, stale timestamp or mismatch.
    """
    if not secret:
        raise WebhookSignatureError("Webhook secret not configured")

    signature_header = headers.get("webhook-signature", "")
    timestamp = headers.get("webhook-timestamp", "")
    webhook_id = headers.get("webhook-id", "")

    if not signature_header or not timestamp or not webhook_id:
        raise WebhookSignatureError("Missing webhook signature headers")

    if not verify_timestamp(timestamp, now=now):
        raise WebhookSignatureError("Webhook timestamp expired or invalid")

    expected = compute_signature(secret, webhook_id, timestamp, raw_body)

    # Header may carry several space-separated signatures during secret rotation
    for candidate in signature_header.split():
        version, _, received = candidate.partition(",")
        if version == "v1" and constant_time_compare(expected, received):
            logger.info(f"✅ Webhook signature verified: {webhook_id}")
            return webhook_id

    logger.error(f"❌ Webhook signature mismatch for {webhook_id}")
    raise WebhookSignatureError("Webhook signature verification failed")
