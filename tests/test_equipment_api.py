import pytest


@pytest.fixture
def mower(client):
    response = client.post(
        "/api/equipment", json={"name": "Zero-turn mower", "type": "Mower", "purchase_cost": 4200}
    )
    assert response.status_code == 201
    return response.json()["data"]


def log_maintenance(client, equipment_id, **overrides):
    payload = {"equipment_id": equipment_id, "type": "scheduled", "date": "2024-01-15", "cost": 120}
    payload.update(overrides)
    response = client.post("/api/maintenance", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def test_new_equipment_defaults(mower):
    assert mower["status"] == "Available"
    assert mower["maintenance_cost"] == 0
    assert mower["last_maintenance_date"] is None


def test_equipment_list_sorted_and_filtered(client, mower):
    client.post("/api/equipment", json={"name": "Aerator", "type": "Aerator", "status": "InUse"})

    names = [e["name"] for e in client.get("/api/equipment").json()["data"]]
    assert names == ["Aerator", "Zero-turn mower"]

    in_use = client.get("/api/equipment", params={"status": "InUse"}).json()["data"]
    assert [e["name"] for e in in_use] == ["Aerator"]

    mowers = client.get("/api/equipment", params={"type": "Mower"}).json()["data"]
    assert [e["id"] for e in mowers] == [mower["id"]]


def test_scheduled_maintenance_rolls_up(client, mower):
    record = log_maintenance(client, mower["id"])

    assert record["equipment_name"] == "Zero-turn mower"
    equipment = client.get(f"/api/equipment/{mower['id']}").json()["data"]
    assert equipment["maintenance_cost"] == 120
    assert equipment["last_maintenance_date"] == "2024-01-15"
    assert equipment["next_maintenance_date"] == "2024-04-15"


def test_repair_does_not_reschedule(client, mower):
    log_maintenance(client, mower["id"])
    log_maintenance(client, mower["id"], type="repair", date="2024-02-01", cost=80.5)

    equipment = client.get(f"/api/equipment/{mower['id']}").json()["data"]
    assert equipment["maintenance_cost"] == 200.5
    assert equipment["last_maintenance_date"] == "2024-02-01"
    assert equipment["next_maintenance_date"] == "2024-04-15"


def test_record_edits_keep_running_cost(client, mower):
    first = log_maintenance(client, mower["id"])
    second = log_maintenance(client, mower["id"], type="inspection", cost=30)

    client.put(f"/api/maintenance/{first['id']}", json={"cost": 100})
    assert client.get(f"/api/equipment/{mower['id']}").json()["data"]["maintenance_cost"] == 130

    client.delete(f"/api/maintenance/{second['id']}")
    assert client.get(f"/api/equipment/{mower['id']}").json()["data"]["maintenance_cost"] == 100


def test_maintenance_list_filters(client, mower):
    log_maintenance(client, mower["id"], date="2024-01-01")
    log_maintenance(client, mower["id"], type="repair", date="2024-03-01")

    records = client.get("/api/maintenance", params={"equipment_id": mower["id"]}).json()["data"]
    assert [r["date"] for r in records] == ["2024-03-01", "2024-01-01"]

    repairs = client.get("/api/maintenance", params={"type": "repair"}).json()["data"]
    assert len(repairs) == 1


def test_maintenance_for_unknown_equipment(client):
    response = client.post(
        "/api/maintenance", json={"equipment_id": 77, "date": "2024-01-01", "cost": 10}
    )
    assert response.status_code == 404


def test_update_equipment_rejects_null_name(client, mower):
    assert client.put(f"/api/equipment/{mower['id']}", json={"name": None}).status_code == 400


def test_update_record_rejects_null_cost(client, mower):
    record = log_maintenance(client, mower["id"])

    response = client.put(f"/api/maintenance/{record['id']}", json={"cost": None})
    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "cost cannot be empty"}
    assert client.get(f"/api/maintenance/{record['id']}").json()["data"]["cost"] == 120
    assert client.get(f"/api/equipment/{mower['id']}").json()["data"]["maintenance_cost"] == 120


def test_delete_equipment_removes_history(client, mower):
    record = log_maintenance(client, mower["id"])

    assert client.delete(f"/api/equipment/{mower['id']}").status_code == 200
    assert client.get(f"/api/maintenance/{record['id']}").status_code == 404
