from datetime import date, timedelta

import pytest
from sqlalchemy.exc import SQLAlchemyError

from bizznex.domain.invoices.repository import InvoiceRepository


@pytest.fixture
def customer(make_client):
    return make_client()


def invoice_payload(client_id, **overrides):
    payload = {
        "client_id": client_id,
        "invoice_date": "2024-05-10",
        "due_date": (date.today() + timedelta(days=30)).isoformat(),
        "items": [
            {"description": "Lawn mowing", "quantity": 2, "rate": 50, "amount": 1},
            {"description": "Hedge trimming", "quantity": 1, "rate": 25},
        ],
        "tax_items": [{"name": "VAT", "rate": 10}],
    }
    payload.update(overrides)
    return payload


def test_create_invoice_computes_totals_server_side(client, customer):
    response = client.post("/api/invoices", json=invoice_payload(customer["id"]))

    assert response.status_code == 201
    invoice = response.json()["data"]
    assert invoice["subtotal"] == 125
    assert invoice["tax_amount"] == 12.5
    assert invoice["total_amount"] == 137.5
    assert invoice["amount_paid"] == 0
    assert invoice["status"] == "Pending"
    assert [item["amount"] for item in invoice["items"]] == [100, 25]
    assert invoice["client"]["name"] == "Acme Corp"


def test_invoice_numbers_follow_monthly_sequence(client, customer):
    first = client.post("/api/invoices", json=invoice_payload(customer["id"])).json()["data"]
    second = client.post("/api/invoices", json=invoice_payload(customer["id"])).json()["data"]

    assert first["invoice_number"] == "INV-202405-001"
    assert second["invoice_number"] == "INV-202405-002"


def test_duplicate_invoice_number_rejected(client, customer):
    payload = invoice_payload(customer["id"], invoice_number="INV-CUSTOM-1")
    assert client.post("/api/invoices", json=payload).status_code == 201

    response = client.post("/api/invoices", json=payload)
    assert response.status_code == 400
    assert "already exists" in response.json()["message"]


def test_due_date_defaults_to_thirty_days(client, customer):
    payload = invoice_payload(customer["id"])
    del payload["due_date"]

    invoice = client.post("/api/invoices", json=payload).json()["data"]
    assert invoice["due_date"] == "2024-06-09"


def test_create_invoice_requires_client_and_items(client, customer):
    response = client.post("/api/invoices", json=invoice_payload(None))
    assert response.status_code == 400
    assert response.json()["message"] == "Please select a client"

    response = client.post("/api/invoices", json=invoice_payload(customer["id"], items=[]))
    assert response.status_code == 400
    assert response.json()["message"] == "At least one line item is required"

    response = client.post(
        "/api/invoices",
        json=invoice_payload(customer["id"], items=[{"description": " ", "rate": 10}]),
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Description is required for item 1"


def test_unknown_client_is_not_found(client):
    response = client.post("/api/invoices", json=invoice_payload(9999))
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Client not found"}


def test_past_due_pending_invoice_becomes_overdue(client, customer):
    yesterday = (date.today() - timedelta(days=1)).isoformat()
    invoice = client.post(
        "/api/invoices", json=invoice_payload(customer["id"], due_date=yesterday)
    ).json()["data"]
    assert invoice["status"] == "Pending"

    listed = client.get("/api/invoices").json()["data"]
    assert listed[0]["status"] == "Overdue"

    overdue_only = client.get("/api/invoices", params={"status": "Overdue"}).json()["data"]
    assert [inv["id"] for inv in overdue_only] == [invoice["id"]]


def test_draft_invoice_never_becomes_overdue(client, customer):
    yesterday = (date.today() - timedelta(days=1)).isoformat()
    invoice = client.post(
        "/api/invoices",
        json=invoice_payload(customer["id"], due_date=yesterday, status="Draft"),
    ).json()["data"]

    fetched = client.get(f"/api/invoices/{invoice['id']}").json()["data"]
    assert fetched["status"] == "Draft"


def test_filter_invoices_by_client(client, make_client):
    first = make_client(name="First")
    second = make_client(name="Second")
    client.post("/api/invoices", json=invoice_payload(first["id"]))
    client.post("/api/invoices", json=invoice_payload(second["id"]))

    rows = client.get("/api/invoices", params={"client_id": second["id"]}).json()["data"]
    assert [row["client_id"] for row in rows] == [second["id"]]


def test_update_invoice_items_recomputes_totals(client, customer):
    invoice = client.post("/api/invoices", json=invoice_payload(customer["id"])).json()["data"]

    response = client.put(
        f"/api/invoices/{invoice['id']}",
        json={"items": [{"description": "Snow removal", "quantity": 3, "rate": 40}]},
    )

    assert response.status_code == 200
    updated = response.json()["data"]
    assert updated["subtotal"] == 120
    assert updated["tax_amount"] == 12
    assert updated["total_amount"] == 132
    assert [item["description"] for item in updated["items"]] == ["Snow removal"]

    items = client.get(f"/api/invoices/{invoice['id']}/items").json()["data"]
    assert len(items) == 1


def test_paid_invoice_cannot_be_edited(client, customer):
    invoice = client.post("/api/invoices", json=invoice_payload(customer["id"])).json()["data"]
    client.post(
        "/api/update-invoice-status",
        json={"invoiceId": invoice["id"], "amount": invoice["total_amount"]},
    )

    response = client.put(f"/api/invoices/{invoice['id']}", json={"notes": "late edit"})
    assert response.status_code == 400


@pytest.mark.parametrize("status", ["Paid", "Overdue"])
def test_update_cannot_set_derived_status(client, customer, status):
    invoice = client.post("/api/invoices", json=invoice_payload(customer["id"])).json()["data"]

    response = client.put(f"/api/invoices/{invoice['id']}", json={"status": status})

    assert response.status_code == 400
    fetched = client.get(f"/api/invoices/{invoice['id']}").json()["data"]
    assert (fetched["status"], fetched["amount_paid"]) == ("Pending", 0)


def test_draft_can_be_issued(client, customer):
    draft = client.post(
        "/api/invoices", json=invoice_payload(customer["id"], status="Draft")
    ).json()["data"]

    response = client.put(f"/api/invoices/{draft['id']}", json={"status": "Pending"})

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "Pending"


def test_partly_paid_invoice_cannot_return_to_draft(client, customer):
    invoice = client.post("/api/invoices", json=invoice_payload(customer["id"])).json()["data"]
    client.post("/api/update-invoice-status", json={"invoiceId": invoice["id"], "amount": 20})

    response = client.put(f"/api/invoices/{invoice['id']}", json={"status": "Draft"})

    assert response.status_code == 400
    assert response.json()["message"] == "Invoices with payments cannot be returned to Draft"
    assert client.get(f"/api/invoices/{invoice['id']}").json()["data"]["status"] == "Pending"


def test_extending_due_date_clears_overdue(client, customer):
    yesterday = (date.today() - timedelta(days=1)).isoformat()
    invoice = client.post(
        "/api/invoices", json=invoice_payload(customer["id"], due_date=yesterday)
    ).json()["data"]
    assert client.get(f"/api/invoices/{invoice['id']}").json()["data"]["status"] == "Overdue"

    later = (date.today() + timedelta(days=30)).isoformat()
    response = client.put(f"/api/invoices/{invoice['id']}", json={"due_date": later})

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "Pending"
    assert client.get(f"/api/invoices/{invoice['id']}").json()["data"]["status"] == "Pending"


def test_past_due_date_keeps_invoice_overdue(client, customer):
    yesterday = (date.today() - timedelta(days=1)).isoformat()
    invoice = client.post(
        "/api/invoices", json=invoice_payload(customer["id"], due_date=yesterday)
    ).json()["data"]
    client.get(f"/api/invoices/{invoice['id']}")

    last_week = (date.today() - timedelta(days=7)).isoformat()
    response = client.put(f"/api/invoices/{invoice['id']}", json={"due_date": last_week})

    assert response.json()["data"]["status"] == "Overdue"


def test_delete_invoice(client, customer):
    invoice = client.post("/api/invoices", json=invoice_payload(customer["id"])).json()["data"]

    assert client.delete(f"/api/invoices/{invoice['id']}").json()["success"] is True
    assert client.get(f"/api/invoices/{invoice['id']}").status_code == 404


def test_invoice_pdf_download(client, customer):
    invoice = client.post("/api/invoices", json=invoice_payload(customer["id"])).json()["data"]

    response = client.get(f"/api/invoices/{invoice['id']}/pdf")

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert invoice["invoice_number"] in response.headers["content-disposition"]
    assert response.content.startswith(b"%PDF")


def test_invoice_document_saves_and_returns_pdf(client, customer):
    response = client.post("/api/invoices/document", json=invoice_payload(customer["id"]))

    assert response.status_code == 200
    assert response.content.startswith(b"%PDF")
    assert response.headers["x-invoice-persisted"] == "true"
    invoice_id = int(response.headers["x-invoice-id"])
    assert client.get(f"/api/invoices/{invoice_id}").json()["data"]["total_amount"] == 137.5


def test_invoice_document_renders_when_save_fails(client, customer, monkeypatch):
    def disk_full(*args, **kwargs):
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(InvoiceRepository, "create_invoice", staticmethod(disk_full))

    response = client.post("/api/invoices/document", json=invoice_payload(customer["id"]))

    assert response.status_code == 200
    assert response.content.startswith(b"%PDF")
    assert response.headers["x-invoice-persisted"] == "false"
    assert "x-invoice-id" not in response.headers
    assert client.get("/api/invoices").json()["data"] == []


def test_numbering_failure_is_a_persistence_error(client, customer, monkeypatch):
    def locked(*args, **kwargs):
        raise SQLAlchemyError("database is locked")

    monkeypatch.setattr(InvoiceRepository, "count_invoice_numbers", staticmethod(locked))

    response = client.post("/api/invoices", json=invoice_payload(customer["id"]))
    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Failed to save invoice"}

    document = client.post("/api/invoices/document", json=invoice_payload(customer["id"]))
    assert document.status_code == 200
    assert document.headers["x-invoice-persisted"] == "false"
    assert document.content.startswith(b"%PDF")


def test_adhoc_pdf_uses_submitted_client(client):
    response = client.post(
        "/api/generate-invoice-pdf",
        json={
            "invoiceNumber": "QUOTE-7",
            "client": {"name": "Walk-in Customer"},
            "items": [{"description": "Gutter cleaning", "quantity": 1, "rate": 80}],
            "taxItems": [{"name": "GST", "rate": 5}],
        },
    )

    assert response.status_code == 200
    assert response.content.startswith(b"%PDF")
    assert "QUOTE-7" in response.headers["content-disposition"]


def test_adhoc_pdf_requires_client(client):
    response = client.post(
        "/api/generate-invoice-pdf",
        json={"clientId": 4242, "items": [{"description": "Gutter cleaning", "rate": 80}]},
    )

    assert response.status_code == 400
    assert response.json()["message"] == (
        "Client not found or invalid client information provided"
    )


def test_send_invoice_without_email_configured_fails(client, make_client):
    customer = make_client(email="owner@acme.test")
    invoice = client.post("/api/invoices", json=invoice_payload(customer["id"])).json()["data"]

    response = client.post(f"/api/invoices/{invoice['id']}/send")

    assert response.status_code == 503
    history = client.get("/api/emails").json()["data"]
    assert history[0]["status"] == "failed"
    assert history[0]["email_type"] == "invoice"


def test_client_to_paid_invoice_scenario(client):
    acme = client.post("/api/clients", json={"name": "Acme", "type": "Commercial"}).json()["data"]
    job = client.post(
        "/api/jobs",
        json={
            "client_id": acme["id"],
            "service": "Installation",
            "date": date.today().isoformat(),
            "total_amount": 500,
        },
    ).json()["data"]

    invoice = client.post(
        "/api/invoices",
        json={
            "client_id": acme["id"],
            "job_id": job["id"],
            "items": [{"description": "Install", "quantity": 1, "rate": 500}],
        },
    ).json()["data"]
    assert (invoice["subtotal"], invoice["total_amount"], invoice["status"]) == (
        500,
        500,
        "Pending",
    )

    paid = client.post(
        "/api/update-invoice-status", json={"invoiceId": invoice["id"], "amount": 500}
    ).json()["data"]
    assert paid["status"] == "Paid"
    assert paid["amount_paid"] == 500
