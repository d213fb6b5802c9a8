import pytest

from proptrack.db.store import StateContainer
from proptrack.models.dashboard import ConversionForm
from proptrack.models.portfolio import EntityStore, House, Lead, Room, Tenant
from proptrack.services.conversion import convert_lead, room_options, start_conversion
from proptrack.services.errors import StateValidationError


def _store() -> EntityStore:
    return EntityStore(
        houses=[House(id="h1", address="1 Elm St", room_count=2)],
        rooms=[Room(id="r1", house_id="h1", name="Room 1"), Room(id="r2", house_id="h1", name="Room 2")],
        tenants=[Tenant(id="t0", name="Existing", house_id="h1", room_id="r1", base_rent=700, monthly_rent=700)],
        leads=[
            Lead(id="l1", name="Bo", phone="555-0102", target_move_in="2024-05-01", budget=750, house_id="h1", room_id="r2"),
            Lead(id="l2", name="Cy", budget=600, house_id="h1", room_id="r1"),
        ],
    )


def test_start_conversion_prefills_from_lead():
    form = start_conversion(_store().find_lead("l1"))
    assert form.name == "Bo"
    assert form.move_in_date == "2024-05-01"
    assert form.base_rent == 750
    assert form.security_deposit == 750
    assert (form.house_id, form.room_id) == ("h1", "r2")
    assert form.duration_months == 12 and form.rent_due_date == 1


def test_convert_creates_active_tenant_and_archives_lead():
    store = _store()
    next_state, tenant = convert_lead(store, "l1", tenant_id="t-new")

    assert [t.id for t in next_state.tenants] == ["t0", "t-new"]
    assert tenant.is_active is True
    assert tenant.monthly_rent == 750
    assert tenant.security_deposit == 750
    assert next_state.find_lead("l1").is_active is False
    assert next_state.find_lead("l2").is_active is True
    # input snapshot untouched
    assert len(store.tenants) == 1
    assert store.find_lead("l1").is_active is True


def test_form_overrides_rent_garage_and_deposit():
    form = ConversionForm(base_rent=700, has_garage=True, garage_price=100, security_deposit=1200, name="Bo B.")
    next_state, tenant = convert_lead(_store(), "l1", form)
    assert tenant.monthly_rent == 800
    assert tenant.security_deposit == 1200
    assert tenant.name == "Bo B."
    assert tenant.phone == "555-0102"


def test_deposit_defaults_to_budget_when_not_given():
    _, tenant = convert_lead(_store(), "l1", ConversionForm(base_rent=900))
    assert tenant.security_deposit == 750
    assert tenant.monthly_rent == 900


def test_occupied_room_is_rejected():
    with pytest.raises(StateValidationError):
        convert_lead(_store(), "l2")


def test_missing_placement_is_rejected():
    store = _store().model_copy(update={"leads": [Lead(id="l3", name="Di", budget=500)]})
    with pytest.raises(StateValidationError, match="house and room"):
        convert_lead(store, "l3")


def test_unknown_lead_is_rejected():
    with pytest.raises(StateValidationError):
        convert_lead(_store(), "nope")


def test_room_options_flag_occupied_rooms():
    options = {o.room.id: o for o in room_options(_store(), "h1")}
    assert options["r1"].occupied is True and options["r1"].occupant_id == "t0"
    assert options["r2"].occupied is False
    editing = {o.room.id: o for o in room_options(_store(), "h1", exclude_tenant_id="t0")}
    assert editing["r1"].occupied is False


def test_container_commits_conversion_as_one_snapshot():
    container = StateContainer(_store())
    seen = []
    container.subscribe(seen.append)

    _, tenant = container.apply(convert_lead, "l1")

    assert len(seen) == 1
    snapshot = seen[0]
    assert snapshot.find_tenant(tenant.id) is not None
    assert snapshot.find_lead("l1").is_active is False


def test_failed_conversion_leaves_container_untouched():
    container = StateContainer(_store())
    before = container.state
    with pytest.raises(StateValidationError):
        container.apply(convert_lead, "l2")
    assert container.state is before


def test_archived_lead_cannot_be_converted_again():
    store = _store()
    store = store.model_copy(update={"rooms": [*store.rooms, Room(id="r3", house_id="h1", name="Room 3")]})
    converted, _ = convert_lead(store, "l1", tenant_id="t-new")

    with pytest.raises(StateValidationError, match="archived"):
        convert_lead(converted, "l1", ConversionForm(house_id="h1", room_id="r3"), tenant_id="t-again")
    assert len([t for t in converted.tenants if t.is_active]) == 2
