import pytest

from proptrack.db.store import StateContainer
from proptrack.models.portfolio import EntityStore, House, Lead, Room, Tenant
from proptrack.services.portfolio import save_tenant
from proptrack.services.rent import default_security_deposit, monthly_rent, with_monthly_rent


def _store() -> EntityStore:
    return EntityStore(
        houses=[House(id="h1", address="1 Elm St", room_count=1)],
        rooms=[Room(id="r1", house_id="h1", name="Room 1")],
    )


def _tenant(**overrides) -> Tenant:
    fields = dict(id="t1", name="Ada", house_id="h1", room_id="r1", base_rent=800.0)
    fields.update(overrides)
    return Tenant(**fields)


def test_garage_price_only_counts_when_selected():
    assert monthly_rent(800, False, 150) == 800
    assert monthly_rent(800, True, 150) == 950


def test_missing_inputs_count_as_zero():
    assert monthly_rent(None, True, None) == 0
    assert monthly_rent(650, True, None) == 650


def test_with_monthly_rent_overrides_hand_edited_total():
    tenant = _tenant(has_garage=True, garage_price=100.0, monthly_rent=5.0)
    assert with_monthly_rent(tenant).monthly_rent == 900


def test_save_tenant_derives_total_on_add_and_edit():
    state = save_tenant(_store(), _tenant(monthly_rent=1.0))
    assert state.find_tenant("t1").monthly_rent == 800

    edited = state.find_tenant("t1").model_copy(update={"has_garage": True, "garage_price": 75.0})
    state = save_tenant(state, edited)
    assert state.find_tenant("t1").monthly_rent == 875

    edited = state.find_tenant("t1").model_copy(update={"has_garage": False})
    state = save_tenant(state, edited)
    assert state.find_tenant("t1").monthly_rent == 800


def test_replacing_tenants_collection_derives_totals():
    container = StateContainer(_store())
    container.replace(
        "tenants",
        [{"id": "t1", "name": "Ada", "houseId": "h1", "roomId": "r1", "baseRent": 700, "hasGarage": True, "garagePrice": 50, "monthlyRent": 0}],
    )
    assert container.state.tenants[0].monthly_rent == pytest.approx(750)


def test_default_deposit_is_one_month_of_budget():
    lead = Lead(id="l1", name="Bo", budget=720.0)
    assert default_security_deposit(lead) == 720
