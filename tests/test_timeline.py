from datetime import date

import pytest

from proptrack.models.dashboard import CollectionStatus
from proptrack.models.portfolio import EntityStore, House, Payment, PaymentPurpose, Room, Tenant
from proptrack.services.timeline import marker_size, project_timeline, timeline_window

TODAY = date(2024, 3, 10)


def _store(**tenant_overrides) -> EntityStore:
    tenant = dict(
        id="t1",
        name="Ada",
        house_id="h1",
        room_id="r1",
        move_in_date="2024-03-15",
        move_out_date="2024-05-31",
        base_rent=800,
        monthly_rent=800,
        rent_due_date=1,
    )
    tenant.update(tenant_overrides)
    return EntityStore(
        houses=[House(id="h1", address="1 Elm St", room_count=1, insurance_renewal_date="2024-04-01")],
        rooms=[Room(id="r1", house_id="h1", name="Room 1")],
        tenants=[Tenant(**tenant)],
        payments=[
            Payment(
                id="p1",
                tenant_id="t1",
                house_id="h1",
                amount=800,
                date="2024-03-30",
                due_month="2024-04",
                purposes=[PaymentPurpose.RENT],
            )
        ],
    )


def test_default_window_spans_week_before_to_ninety_days_after():
    assert timeline_window(TODAY) == (date(2024, 3, 3), date(2024, 6, 8))


def test_window_shifts_by_whole_months():
    assert timeline_window(TODAY, 1) == (date(2024, 4, 3), date(2024, 7, 8))
    assert timeline_window(TODAY, -1) == (date(2024, 2, 3), date(2024, 5, 8))


def test_events_are_grouped_by_date_and_house():
    timeline = project_timeline(_store(), today=TODAY)

    assert timeline.event_count == 6
    assert [m.date for m in timeline.markers] == ["2024-03-15", "2024-04-01", "2024-05-01", "2024-05-31", "2024-06-01"]

    april = timeline.markers[1]
    assert sorted(e.kind for e in april.events) == ["insurance-renewal", "rent-due"]
    assert april.status == "paid"
    assert april.address == "1 Elm St"
    assert april.position == pytest.approx(29 / 97 * 100)


def test_marker_status_rules():
    markers = {m.date: m for m in project_timeline(_store(), today=TODAY).markers}
    assert markers["2024-03-15"].status == "info"
    assert markers["2024-05-01"].status == "unpaid"
    assert markers["2024-05-31"].status == "info"
    rent_event = markers["2024-05-01"].events[0]
    assert rent_event.due_month == "2024-05"
    assert rent_event.status == CollectionStatus.UNPAID


def test_today_marker_only_inside_window():
    timeline = project_timeline(_store(), today=TODAY)
    assert timeline.today_position == pytest.approx(7 / 97 * 100)
    shifted = project_timeline(_store(), today=TODAY, month_offset=1)
    assert shifted.today_position is None
    assert shifted.window_start == "2024-04-03"


def test_positions_stay_on_scale():
    timeline = project_timeline(_store(), today=TODAY)
    assert all(0 <= m.position <= 100 for m in timeline.markers)


def test_archived_tenants_have_no_events():
    timeline = project_timeline(_store(is_active=False), today=TODAY)
    assert [e.kind for m in timeline.markers for e in m.events] == ["insurance-renewal"]


def test_rent_due_day_is_clamped_to_month_length():
    timeline = project_timeline(_store(rent_due_date=31, move_out_date=""), today=TODAY)
    due_dates = [e.date for m in timeline.markers for e in m.events if e.kind == "rent-due"]
    assert due_dates == ["2024-03-31", "2024-04-30", "2024-05-31"]


def test_unparseable_dates_are_skipped():
    timeline = project_timeline(_store(move_in_date="TBD", move_out_date="later"), today=TODAY)
    kinds = {e.kind for m in timeline.markers for e in m.events}
    assert kinds == {"rent-due", "insurance-renewal"}


def test_marker_size_shrinks_with_density_and_floors():
    assert marker_size(0) == pytest.approx(32)
    assert marker_size(10) == pytest.approx(25.6)
    assert marker_size(100) == pytest.approx(32 * 0.6)
    assert marker_size(10) > marker_size(11)
