import json
import time

import pytest

from bizznex.models import Profile
from bizznex.webhook_security import compute_signature

from .conftest import WEBHOOK_SECRET


def signed_headers(body: bytes, webhook_id: str = "msg_1", secret: str = WEBHOOK_SECRET) -> dict:
    timestamp = str(int(time.time()))
    signature = compute_signature(secret, webhook_id, timestamp, body)
    return {
        "webhook-id": webhook_id,
        "webhook-timestamp": timestamp,
        "webhook-signature": f"v1,{signature}",
        "content-type": "application/json",
    }


def deliver(client, event: dict, path: str = "/api/webhooks/payments", **kwargs):
    body = json.dumps(event).encode()
    return client.post(path, content=body, headers=signed_headers(body, **kwargs))


def load_profile(db, profile_id="user_1") -> Profile:
    db.expire_all()
    return db.get(Profile, profile_id)


CHECKOUT_COMPLETED = {
    "type": "checkout.session.completed",
    "data": {
        "object": {
            "customer": "cus_1",
            "subscription": "sub_1",
            "metadata": {"userId": "user_1", "priceId": "price_pro"},
        }
    },
}


@pytest.fixture
def subscriber(make_profile):
    return make_profile("user_1")


def test_checkout_completed_activates_plan(client, db, subscriber):
    response = deliver(client, CHECKOUT_COMPLETED)

    assert response.status_code == 200
    assert response.json() == {"received": True}
    profile = load_profile(db)
    assert profile.plan == "pro"
    assert profile.subscription_status == "active"
    assert profile.dodo_customer_id == "cus_1"
    assert profile.dodo_subscription_id == "sub_1"


def test_replayed_delivery_is_idempotent(client, db, subscriber):
    assert deliver(client, CHECKOUT_COMPLETED).status_code == 200
    assert deliver(client, CHECKOUT_COMPLETED).status_code == 200

    profile = load_profile(db)
    assert (profile.plan, profile.subscription_status) == ("pro", "active")
    assert db.query(Profile).count() == 1


def test_legacy_webhook_path(client, db, subscriber):
    response = deliver(client, CHECKOUT_COMPLETED, path="/api/webhooks/stripe")

    assert response.status_code == 200
    assert load_profile(db).plan == "pro"


def test_native_subscription_active_event(client, db, subscriber):
    event = {
        "type": "subscription.active",
        "data": {
            "subscription_id": "sub_9",
            "product_id": "price_starter",
            "customer": {"customer_id": "cus_9", "email": "user_1@bizznex.test"},
            "metadata": {"userId": "user_1"},
        },
    }

    assert deliver(client, event).status_code == 200

    profile = load_profile(db)
    assert profile.plan == "starter"
    assert profile.dodo_customer_id == "cus_9"
    assert profile.dodo_subscription_id == "sub_9"


def test_bad_signature_changes_nothing(client, db, subscriber):
    body = json.dumps(CHECKOUT_COMPLETED).encode()
    headers = signed_headers(body, secret="whsec_" + "d3Jvbmcta2V5")

    response = client.post("/api/webhooks/payments", content=body, headers=headers)

    assert response.status_code == 400
    assert response.json()["success"] is False
    profile = load_profile(db)
    assert profile.plan is None
    assert profile.subscription_status is None


def test_missing_signature_headers(client):
    response = client.post("/api/webhooks/payments", json=CHECKOUT_COMPLETED)
    assert response.status_code == 400


def test_stale_timestamp_rejected(client, subscriber):
    body = json.dumps(CHECKOUT_COMPLETED).encode()
    stale = str(int(time.time()) - 3600)
    headers = {
        "webhook-id": "msg_old",
        "webhook-timestamp": stale,
        "webhook-signature": "v1," + compute_signature(WEBHOOK_SECRET, "msg_old", stale, body),
    }

    response = client.post("/api/webhooks/payments", content=body, headers=headers)
    assert response.status_code == 400


def test_invalid_json_body(client):
    body = b"not json"
    response = client.post("/api/webhooks/payments", content=body, headers=signed_headers(body))

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid JSON payload"


def test_subscription_updated_changes_status_and_plan(client, db, subscriber):
    deliver(client, CHECKOUT_COMPLETED)
    event = {
        "type": "customer.subscription.updated",
        "data": {
            "object": {
                "id": "sub_1",
                "status": "past_due",
                "items": {"data": [{"price": {"id": "price_starter"}}]},
            }
        },
    }

    assert deliver(client, event, webhook_id="msg_2").status_code == 200

    profile = load_profile(db)
    assert profile.subscription_status == "past_due"
    assert profile.plan == "starter"


def test_update_for_unknown_subscription_fails(client):
    event = {"type": "subscription.updated", "data": {"subscription_id": "sub_missing"}}

    response = deliver(client, event)

    assert response.status_code == 500
    assert response.json()["message"] == "No profile found for subscription sub_missing"


def test_subscription_deleted_cancels(client, db, subscriber):
    deliver(client, CHECKOUT_COMPLETED)
    event = {"type": "customer.subscription.deleted", "data": {"object": {"id": "sub_1"}}}

    assert deliver(client, event, webhook_id="msg_3").status_code == 200

    profile = load_profile(db)
    assert profile.subscription_status == "canceled"
    assert profile.plan is None


def test_unknown_event_is_acknowledged(client, db, subscriber):
    response = deliver(client, {"type": "payment.refunded", "data": {"object": {}}})

    assert response.status_code == 200
    assert load_profile(db).plan is None


def test_checkout_without_user_id_fails(client):
    event = {
        "type": "checkout.session.completed",
        "data": {"object": {"customer": "cus_1", "metadata": {"priceId": "price_pro"}}},
    }

    response = deliver(client, event)

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "message": "Missing userId in checkout metadata",
    }
