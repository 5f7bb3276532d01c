import base64

import pytest
from fastapi.testclient import TestClient

from bizznex.config import Settings
from bizznex.main import create_app
from bizznex.models import Profile

WEBHOOK_SECRET = "whsec_" + base64.b64encode(b"bizznex-test-signing-key").decode()


class FakePayments:
    """Stand-in for the payments provider that records every call"""

    def __init__(self):
        self.checkout_calls = []
        self.portal_calls = []

    def is_available(self) -> bool:
        return True

    async def create_checkout_session(
        self, product_id, customer_email, return_url, metadata=None, quantity=1
    ):
        self.checkout_calls.append(
            {
                "product_id": product_id,
                "customer_email": customer_email,
                "return_url": return_url,
                "metadata": metadata,
            }
        )
        return {"session_id": "cks_test_123", "checkout_url": "https://checkout.test/cks_test_123"}

    async def create_portal_session(self, customer_id):
        self.portal_calls.append(customer_id)
        return f"https://portal.test/{customer_id}"


@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite://",
        db_log_slow_queries=False,
        auth_bypass=True,
        starter_price_id="price_starter",
        pro_price_id="price_pro",
        dodo_payments_webhook_secret=WEBHOOK_SECRET,
        base_url="https://app.bizznex.test",
        resend_api_key=None,
    )


@pytest.fixture
def payments():
    return FakePayments()


@pytest.fixture
def app(settings, payments):
    app = create_app(settings)
    app.state.payments = payments
    return app


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db(app, client):
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_client(client):
    def _make(**overrides):
        payload = {"name": "Acme Corp", "email": "billing@acme.test", "address": "1 Main St"}
        payload.update(overrides)
        response = client.post("/api/clients", json=payload)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _make


@pytest.fixture
def make_profile(db):
    def _make(profile_id="user_1", **fields):
        profile = Profile(id=profile_id, email=f"{profile_id}@bizznex.test", **fields)
        db.add(profile)
        db.commit()
        return profile

    return _make
