import pytest


@pytest.fixture
def job(client, make_client):
    customer = make_client()
    response = client.post(
        "/api/jobs",
        json={"client_id": customer["id"], "service": "Spring cleanup", "date": "2024-04-02"},
    )
    assert response.status_code == 201
    return response.json()["data"]


def log_expense(client, **overrides):
    payload = {"vendor": "Green Supply Co", "date": "2024-04-03", "total_amount": 84.5}
    payload.update(overrides)
    response = client.post("/api/expenses", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def test_log_expense_against_job(client, job):
    expense = log_expense(
        client,
        job_id=job["id"],
        category="Materials",
        items=[{"name": "Mulch", "price": 60}, {"name": "Edging", "price": 24.5}],
    )

    assert expense["status"] == "Pending"
    assert expense["total_amount"] == 84.5
    assert [item["name"] for item in expense["items"]] == ["Mulch", "Edging"]
    assert expense["job"]["service"] == "Spring cleanup"
    assert expense["job"]["client_name"] == "Acme Corp"

    fetched = client.get(f"/api/expenses/{expense['id']}").json()["data"]
    assert fetched["job"]["id"] == job["id"]


def test_total_defaults_to_item_sum(client):
    expense = log_expense(
        client,
        total_amount=None,
        items=[{"name": "Fuel", "price": 40.25}, {"name": "Oil", "price": 9.5}],
    )
    assert expense["total_amount"] == 49.75


def test_expense_requires_vendor(client):
    response = client.post("/api/expenses", json={"vendor": "  ", "total_amount": 10})
    assert response.status_code == 400


def test_expense_for_unknown_job(client):
    response = client.post(
        "/api/expenses", json={"vendor": "Hardware Depot", "total_amount": 10, "job_id": 999}
    )
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Job not found"}


def test_list_filters_and_order(client, job):
    log_expense(client, vendor="Green Supply Co", date="2024-04-01", job_id=job["id"])
    log_expense(client, vendor="Fuel Stop", date="2024-04-20")
    log_expense(client, vendor="GREEN SUPPLY CO", date="2024-05-02")

    rows = client.get("/api/expenses").json()["data"]
    assert [r["date"] for r in rows] == ["2024-05-02", "2024-04-20", "2024-04-01"]

    green = client.get("/api/expenses", params={"vendor": "green supply"}).json()["data"]
    assert len(green) == 2

    april = client.get(
        "/api/expenses", params={"start_date": "2024-04-01", "end_date": "2024-04-30"}
    ).json()["data"]
    assert [r["vendor"] for r in april] == ["Fuel Stop", "Green Supply Co"]

    for_job = client.get("/api/expenses", params={"job_id": job["id"]}).json()["data"]
    assert [r["date"] for r in for_job] == ["2024-04-01"]


def test_inverted_date_range_rejected(client):
    response = client.get(
        "/api/expenses", params={"start_date": "2024-05-01", "end_date": "2024-04-01"}
    )
    assert response.status_code == 400


def test_update_replaces_items_and_reconciles(client):
    expense = log_expense(client, items=[{"name": "Seed", "price": 84.5}])

    response = client.put(
        f"/api/expenses/{expense['id']}",
        json={"status": "Reconciled", "items": [{"name": "Seed", "price": 30}]},
    )

    assert response.status_code == 200
    updated = response.json()["data"]
    assert updated["status"] == "Reconciled"
    assert updated["total_amount"] == 30
    assert len(updated["items"]) == 1


def test_update_rejects_null_vendor(client):
    expense = log_expense(client)
    assert client.put(f"/api/expenses/{expense['id']}", json={"vendor": None}).status_code == 400


def test_missing_expense_is_not_found(client):
    assert client.get("/api/expenses/4242").status_code == 404
    assert client.put("/api/expenses/4242", json={"notes": "x"}).status_code == 404
    response = client.delete("/api/expenses/4242")
    assert response.status_code == 404
    assert response.json()["message"] == "Expense not found"


def test_delete_expense(client):
    expense = log_expense(client)

    response = client.delete(f"/api/expenses/{expense['id']}")
    assert response.json() == {"success": True, "message": "Expense deleted successfully"}
    assert client.get(f"/api/expenses/{expense['id']}").status_code == 404


def test_deleting_job_keeps_expense(client, job):
    expense = log_expense(client, job_id=job["id"])

    assert client.delete(f"/api/jobs/{job['id']}").status_code == 200

    fetched = client.get(f"/api/expenses/{expense['id']}").json()["data"]
    assert fetched["job_id"] is None
    assert fetched["job"] is None


def test_summary_totals(client):
    empty = client.get("/api/expenses/summary").json()["data"]
    assert empty == {"expense_count": 0, "pending_count": 0, "total_expenses": 0, "recent": []}

    log_expense(client, vendor="A", total_amount=10)
    log_expense(client, vendor="B", total_amount=20.25, status="Reconciled")
    log_expense(client, vendor="C", total_amount=5)
    log_expense(client, vendor="D", total_amount=1.1)

    summary = client.get("/api/expenses/summary").json()["data"]
    assert summary["expense_count"] == 4
    assert summary["pending_count"] == 3
    assert summary["total_expenses"] == 36.35
    assert [e["vendor"] for e in summary["recent"]] == ["D", "C", "B"]
