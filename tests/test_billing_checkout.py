from fastapi.testclient import TestClient

from bizznex.models import Profile


def test_checkout_session_for_known_price(client, payments):
    response = client.post(
        "/api/create-checkout-session", json={"priceId": "price_pro", "email": "Owner@Shop.test"}
    )

    assert response.status_code == 200
    assert response.json() == {
        "sessionId": "cks_test_123",
        "url": "https://checkout.test/cks_test_123",
    }
    call = payments.checkout_calls[0]
    assert call["product_id"] == "price_pro"
    assert call["customer_email"] == "owner@shop.test"
    assert call["return_url"] == "https://app.bizznex.test/dashboard"
    assert call["metadata"] == {"priceId": "price_pro", "userId": "local-dev"}


def test_checkout_rejects_unknown_price(client, payments):
    response = client.post(
        "/api/create-checkout-session", json={"priceId": "price_gold", "email": "a@b.test"}
    )

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Invalid priceId"}
    assert payments.checkout_calls == []


def test_checkout_requires_price(client):
    response = client.post("/api/create-checkout-session", json={"email": "a@b.test"})

    assert response.status_code == 400
    assert response.json()["message"] == "Missing priceId"


def test_checkout_requires_email(client, payments):
    response = client.post("/api/create-checkout-session", json={"priceId": "price_starter"})

    assert response.status_code == 400
    assert response.json()["message"] == "Email is required for checkout"
    assert payments.checkout_calls == []


def test_guest_checkout_without_identity(app, payments):
    app.state.settings = app.state.settings.model_copy(update={"auth_bypass": False})
    with TestClient(app) as guest:
        response = guest.post(
            "/api/create-checkout-session",
            json={"priceId": "price_starter", "email": "guest@shop.test"},
        )

    assert response.status_code == 200
    assert payments.checkout_calls[0]["metadata"] == {"priceId": "price_starter"}


def test_portal_requires_billing_account(client):
    response = client.post("/api/create-portal-session")

    assert response.status_code == 400
    assert "subscribe" in response.json()["message"]


def test_portal_session_for_subscriber(client, db, payments):
    client.get("/api/profile")
    profile = db.get(Profile, "local-dev")
    profile.dodo_customer_id = "cus_42"
    db.commit()

    response = client.post("/api/create-portal-session")

    assert response.status_code == 200
    assert response.json() == {"url": "https://portal.test/cus_42"}
    assert payments.portal_calls == ["cus_42"]


def test_protected_route_without_token(app):
    app.state.settings = app.state.settings.model_copy(update={"auth_bypass": False})
    with TestClient(app) as anonymous:
        response = anonymous.get("/api/clients")

    assert response.status_code == 401
    assert response.json()["success"] is False
