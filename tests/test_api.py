import pytest
from fastapi.testclient import TestClient

from proptrack.api import app, get_container
from proptrack.db.seed import initial_state
from proptrack.db.store import StateContainer
from proptrack.models.portfolio import Lead


@pytest.fixture
def container():
    state = initial_state()
    state = state.model_copy(
        update={"leads": [Lead(id="l1", name="Bo", budget=750, house_id="h1", room_id="r2", target_move_in="2024-05-01")]}
    )
    container = StateContainer(state)
    app.dependency_overrides[get_container] = lambda: container
    yield container
    app.dependency_overrides.clear()


@pytest.fixture
def client(container):
    return TestClient(app)


def test_health(client):
    assert client.get("/api/health").json() == {"status": "ok"}


def test_summary_endpoint(client):
    resp = client.get("/api/summary", params={"month": "2023-01"})
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["total_revenue"] == 800
    assert payload["vacant_count"] == 2
    assert payload["tenants"][0]["status"] == "paid"
    assert client.get("/api/summary", params={"month": "Jan"}).status_code == 422


def test_payment_without_purpose_is_a_400(client, container):
    resp = client.post(
        "/api/payments",
        json={"tenantId": "t1", "amount": 800, "date": "2023-02-01", "dueMonth": "2023-02", "purposes": []},
    )
    assert resp.status_code == 400
    assert len(container.state.payments) == 1


def test_record_payment_and_receipt(client):
    resp = client.post(
        "/api/payments",
        json={"tenantId": "t1", "amount": 400, "date": "2023-02-01", "dueMonth": "2023-02", "purposes": ["Rent"]},
    )
    assert resp.status_code == 200
    payment = resp.json()
    assert payment["houseId"] == "h1"
    status = client.get("/api/tenants/t1/status", params={"month": "2023-02"}).json()
    assert status["status"] == "partial"
    receipt = client.get(f"/api/payments/{payment['id']}/receipt").json()
    assert "Amount: $400" in receipt["text"]


def test_delete_house_needs_confirm(client, container):
    assert client.delete("/api/houses/h1").status_code == 409
    assert container.state.find_house("h1") is not None

    resp = client.delete("/api/houses/h1", params={"confirm": "true"})
    assert resp.status_code == 200
    assert resp.json()["houses"] == []
    assert container.state.find_tenant("t1").is_active is False
    assert client.delete("/api/houses/h1", params={"confirm": "true"}).status_code == 404


def test_convert_lead(client, container):
    defaults = client.get("/api/leads/l1/conversion").json()
    assert defaults["securityDeposit"] == 750

    resp = client.post("/api/leads/l1/convert", json={"hasGarage": True, "garagePrice": 50})
    assert resp.status_code == 200
    tenant = resp.json()
    assert tenant["monthlyRent"] == 800
    assert tenant["roomId"] == "r2"
    assert container.state.find_lead("l1").is_active is False

    again = client.post("/api/leads/l1/convert")
    assert again.status_code == 400


def test_fees_and_ledger(client):
    fees = client.get("/api/tenants/t1/fees").json()
    assert fees == {"holding": False, "security": False, "first_month": True}
    ledger = client.get("/api/tenants/t1/ledger").json()
    assert ledger["year"] == 2023
    assert ledger["months"][0]["total"] == 800
    assert client.get("/api/tenants/ghost/fees").status_code == 404


def test_timeline_endpoint(client):
    resp = client.get("/api/timeline", params={"today": "2024-11-20"})
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["window_start"] == "2024-11-13"
    dates = [m["date"] for m in payload["markers"]]
    assert "2024-12-01" in dates


def test_replace_collection(client, container):
    assert client.put("/api/state/widgets", json=[]).status_code == 404
    resp = client.put("/api/state/lentItems", json=[{"id": "i1", "tenantId": "t1", "itemName": "Fan", "lentDate": "2024-01-01"}])
    assert resp.status_code == 200
    assert resp.json()["lentItems"][0]["itemName"] == "Fan"
    assert container.state.lent_items[0].item_name == "Fan"
    assert client.put("/api/state/rooms", json=[{"name": "no ids"}]).status_code == 422


def test_vacancies_and_room_options(client):
    vacancies = client.get("/api/vacancies").json()
    assert vacancies["total"] == 2
    rooms = client.get("/api/houses/h1/rooms").json()
    assert [r["occupied"] for r in rooms] == [True, False, False]


def test_update_house_endpoint(client, container):
    resp = client.put("/api/houses/h1", json={"address": "125 Maple Avenue", "roomCount": 3})
    assert resp.status_code == 200
    assert resp.json()["address"] == "125 Maple Avenue"
    assert container.state.find_house("h1").address == "125 Maple Avenue"
    assert client.put("/api/houses/h9", json={"address": "x"}).status_code == 404


def test_delete_unknown_payment_is_a_404(client, container):
    before = container.state
    assert client.delete("/api/payments/nope", params={"confirm": "true"}).status_code == 404
    assert container.state is before
    assert client.delete("/api/payments/p1").status_code == 409
    assert client.delete("/api/payments/p1", params={"confirm": "true"}).status_code == 200
    assert container.state.payments == []
