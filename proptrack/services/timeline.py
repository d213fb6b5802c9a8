"""Project dated portfolio events onto a rolling dashboard window."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Dict, List, Optional, Tuple

import numpy as np

from ..models.dashboard import CollectionStatus, Timeline, TimelineEvent, TimelineMarker
from ..models.portfolio import EntityStore
from ..utils.dates import clamp_day, month_key, parse_date, shift_months
from ..utils.logging import get_logger
from .collection import tenant_month_status

LOGGER = get_logger("services.timeline")

DAYS_BEFORE = 7
DAYS_AFTER = 90
RENT_DUE_MONTHS = 6

BASE_MARKER_SIZE = 32.0
DENSITY_STEP = 0.02
MIN_MARKER_SCALE = 0.6


def timeline_window(today: date, month_offset: int = 0) -> Tuple[date, date]:
    start = shift_months(today - timedelta(days=DAYS_BEFORE), month_offset)
    end = shift_months(today + timedelta(days=DAYS_AFTER), month_offset)
    return start, end


def marker_size(event_count: int, baseline: float = BASE_MARKER_SIZE) -> float:
    """Shrink markers as the window gets busier, never below 60% of baseline."""

    scale = float(np.clip(1.0 - DENSITY_STEP * max(event_count, 0), MIN_MARKER_SCALE, 1.0))
    return baseline * scale


def window_position(day: date, start: date, end: date) -> float:
    span = (end - start).days
    if span <= 0:
        return 0.0
    return (day - start).days / span * 100


def collect_events(store: EntityStore, start: date, end: date) -> List[Tuple[date, TimelineEvent]]:
    events: List[Tuple[date, TimelineEvent]] = []

    def add(day: Optional[date], event: TimelineEvent) -> None:
        if day is not None and start <= day <= end:
            events.append((day, event))

    for tenant in store.active_tenants():
        move_in = parse_date(tenant.move_in_date)
        if move_in is not None:
            add(
                move_in,
                TimelineEvent(
                    kind="move-in",
                    date=move_in.isoformat(),
                    house_id=tenant.house_id,
                    label=f"{tenant.name} moves in",
                    tenant_id=tenant.id,
                ),
            )
        move_out = parse_date(tenant.move_out_date)
        if move_out is not None:
            add(
                move_out,
                TimelineEvent(
                    kind="lease-end",
                    date=move_out.isoformat(),
                    house_id=tenant.house_id,
                    label=f"{tenant.name} lease ends",
                    tenant_id=tenant.id,
                ),
            )
        first_month = start.replace(day=1)
        for i in range(RENT_DUE_MONTHS):
            month_start = shift_months(first_month, i)
            due = clamp_day(month_start.year, month_start.month, tenant.rent_due_date)
            if not start <= due <= end:
                continue
            due_month = month_key(due)
            add(
                due,
                TimelineEvent(
                    kind="rent-due",
                    date=due.isoformat(),
                    house_id=tenant.house_id,
                    label=f"{tenant.name} rent due",
                    tenant_id=tenant.id,
                    due_month=due_month,
                    status=tenant_month_status(tenant, store.payments, due_month),
                ),
            )

    for house in store.houses:
        renewal = parse_date(house.insurance_renewal_date)
        if renewal is not None:
            add(
                renewal,
                TimelineEvent(
                    kind="insurance-renewal",
                    date=renewal.isoformat(),
                    house_id=house.id,
                    label=f"Insurance renewal ({house.bank or 'policy'})",
                ),
            )
    return events


def marker_status(events: List[TimelineEvent]) -> str:
    rent_due = [e for e in events if e.kind == "rent-due"]
    if not rent_due:
        return "info"
    if all(e.status == CollectionStatus.PAID for e in rent_due):
        return "paid"
    return "unpaid"


def project_timeline(store: EntityStore, today: Optional[date] = None, month_offset: int = 0) -> Timeline:
    today = today or date.today()
    start, end = timeline_window(today, month_offset)
    events = collect_events(store, start, end)

    groups: Dict[Tuple[date, str], List[TimelineEvent]] = {}
    for day, event in sorted(events, key=lambda item: (item[0], item[1].house_id)):
        groups.setdefault((day, event.house_id), []).append(event)

    markers = []
    for (day, house_id), grouped in groups.items():
        house = store.find_house(house_id)
        markers.append(
            TimelineMarker(
                date=day.isoformat(),
                house_id=house_id,
                address=house.address if house else "Unknown",
                position=window_position(day, start, end),
                status=marker_status(grouped),
                events=grouped,
            )
        )

    LOGGER.debug(
        "projected_timeline start=%s end=%s events=%d markers=%d", start, end, len(events), len(markers)
    )
    return Timeline(
        window_start=start.isoformat(),
        window_end=end.isoformat(),
        today=today.isoformat(),
        month_offset=month_offset,
        today_position=window_position(today, start, end) if start <= today <= end else None,
        event_count=len(events),
        marker_size=marker_size(len(events)),
        markers=markers,
    )
