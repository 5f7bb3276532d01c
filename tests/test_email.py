import pytest
import resend

from bizznex.email_service import EmailService


@pytest.fixture
def configured(app, settings):
    app.state.settings = settings.model_copy(update={"resend_api_key": "re_test_key"})
    return app.state.settings


@pytest.fixture
def sent(monkeypatch):
    calls = []

    def fake_send(params):
        calls.append(params)
        return {"id": f"email_{len(calls)}"}

    monkeypatch.setattr(resend.Emails, "send", fake_send)
    return calls


def test_send_email_records_history(client, configured, sent):
    response = client.post(
        "/api/send-email",
        json={"to": "client@acme.test", "subject": "Hello", "message": "See you Monday"},
    )

    assert response.status_code == 200
    result = response.json()["data"]
    assert result["success"] is True
    assert result["provider_id"] == "email_1"
    assert sent[0]["to"] == ["client@acme.test"]
    assert sent[0]["text"] == "See you Monday"
    assert sent[0]["from"] == configured.email_from_address

    history = client.get("/api/emails").json()["data"]
    assert len(history) == 1
    assert history[0]["status"] == "sent"
    assert history[0]["id"] == result["log_id"]


def test_html_email_uses_html_body(client, configured, sent):
    client.post(
        "/api/send-email",
        json={"to": "client@acme.test", "subject": "Hi", "body": "<p>Hi</p>", "isHtml": True},
    )

    assert sent[0]["html"] == "<p>Hi</p>"
    assert "text" not in sent[0]


def test_provider_failure_is_logged_as_failed(client, configured, monkeypatch):
    def boom(params):
        raise RuntimeError("rate limited")

    monkeypatch.setattr(resend.Emails, "send", boom)

    response = client.post(
        "/api/send-email", json={"to": "client@acme.test", "subject": "Hi", "body": "x"}
    )

    assert response.status_code == 502
    history = client.get("/api/emails").json()["data"]
    assert history[0]["status"] == "failed"
    assert history[0]["error"] == "rate limited"


def test_unconfigured_email_service(client, sent):
    response = client.post(
        "/api/send-email", json={"to": "client@acme.test", "subject": "Hi", "body": "x"}
    )

    assert response.status_code == 503
    assert sent == []
    assert client.get("/api/emails").json()["data"][0]["error"] == "Email service not configured"


def test_email_history_crud(client):
    created = client.post(
        "/api/emails",
        json={"to": "a@b.test", "subject": "Manual", "body": "Logged by hand", "email_type": "custom"},
    )
    assert created.status_code == 201
    log_id = created.json()["data"]["id"]

    assert client.delete(f"/api/emails/{log_id}").status_code == 200
    assert client.get("/api/emails").json()["data"] == []
    assert client.delete(f"/api/emails/{log_id}").status_code == 404


def test_job_confirmation_email(client, configured, sent, make_client):
    customer = make_client(email="home@owner.test")
    job = client.post(
        "/api/jobs",
        json={"client_id": customer["id"], "service": "Window washing", "date": "2024-06-03"},
    ).json()["data"]

    response = client.post(f"/api/jobs/{job['id']}/confirm", json={})

    assert response.status_code == 200
    assert sent[0]["to"] == ["home@owner.test"]
    assert "Window washing" in sent[0]["html"]
    history = client.get("/api/emails").json()["data"]
    assert history[0]["email_type"] == "job_confirmation"


def test_invoice_email(client, configured, sent, make_client):
    customer = make_client(email="billing@acme.test")
    invoice = client.post(
        "/api/invoices",
        json={
            "client_id": customer["id"],
            "invoice_number": "INV-TEST-1",
            "items": [{"description": "Pruning", "quantity": 2, "rate": 40}],
        },
    ).json()["data"]

    response = client.post(f"/api/invoices/{invoice['id']}/send")

    assert response.status_code == 200
    assert response.json()["data"]["success"] is True
    assert "INV-TEST-1" in sent[0]["subject"]


def test_send_email_service_directly(db, settings):
    service = EmailService(settings, db)

    result = service.send_email("a@b.test", "Subject", "Body")

    assert result.success is False
    assert result.error == "Email service not configured"
    assert service.list_history()[0].status == "failed"
