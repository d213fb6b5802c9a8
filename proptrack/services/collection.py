"""Monthly rent collection, vacancy and portfolio rollups."""

from __future__ import annotations

from typing import Dict, Iterable, List

import pandas as pd

from ..models.dashboard import CollectionStatus, MonthlySummary, PropertySummary, TenantCollection
from ..models.portfolio import EntityStore, House, Payment, Room, Tenant
from ..utils.logging import get_logger

LOGGER = get_logger("services.collection")

PAYMENT_COLUMNS = ["payment_id", "tenant_id", "house_id", "amount", "due_month", "is_rent"]


def payments_frame(payments: Iterable[Payment]) -> pd.DataFrame:
    rows = [
        {
            "payment_id": p.id,
            "tenant_id": p.tenant_id,
            "house_id": p.house_id,
            "amount": float(p.amount),
            "due_month": p.due_month,
            "is_rent": p.counts_as_rent,
        }
        for p in payments
    ]
    frame = pd.DataFrame(rows, columns=PAYMENT_COLUMNS)
    return frame.astype({"amount": float, "is_rent": bool})


def classify_collection(collected: float, monthly_rent: float) -> CollectionStatus:
    if collected >= monthly_rent:
        return CollectionStatus.PAID
    if collected > 0:
        return CollectionStatus.PARTIAL
    return CollectionStatus.UNPAID


def rent_collected(tenant: Tenant, payments: Iterable[Payment], month: str) -> float:
    """Rent and first-month payments credited to ``month`` for one tenant."""

    return float(
        sum(p.amount for p in payments if p.tenant_id == tenant.id and p.due_month == month and p.counts_as_rent)
    )


def tenant_month_status(tenant: Tenant, payments: Iterable[Payment], month: str) -> CollectionStatus:
    return classify_collection(rent_collected(tenant, payments, month), tenant.monthly_rent)


def vacant_rooms(store: EntityStore) -> List[Room]:
    occupied = {t.room_id for t in store.tenants if t.is_active}
    return [room for room in store.rooms if room.id not in occupied]


def summarize_month(store: EntityStore, month: str, cumulative: bool = False) -> MonthlySummary:
    """Collection totals for one due month.

    Revenue is filtered by due month unless ``cumulative`` is set, in which
    case every payment recorded to date counts. Expected revenue and expenses
    are always monthly figures, so progress above 100 means overpayment.
    """

    frame = payments_frame(store.payments)
    month_frame = frame[frame["due_month"] == month]
    revenue_frame = frame if cumulative else month_frame

    total_revenue = float(revenue_frame["amount"].sum())
    active = store.active_tenants()
    total_expected = float(sum(t.monthly_rent for t in active))
    total_expenses = float(sum(h.monthly_expense for h in store.houses))
    progress = total_revenue / total_expected * 100 if total_expected > 0 else 0.0
    vacancies = vacant_rooms(store)

    rent_frame = month_frame[month_frame["is_rent"]]
    collected_by_tenant: Dict[str, float] = rent_frame.groupby("tenant_id")["amount"].sum().to_dict()
    tenants = [
        TenantCollection(
            tenant_id=t.id,
            name=t.name,
            house_id=t.house_id,
            room_id=t.room_id,
            monthly_rent=t.monthly_rent,
            collected=float(collected_by_tenant.get(t.id, 0.0)),
            status=classify_collection(float(collected_by_tenant.get(t.id, 0.0)), t.monthly_rent),
        )
        for t in active
    ]

    revenue_by_house: Dict[str, float] = revenue_frame.groupby("house_id")["amount"].sum().to_dict()
    vacant_ids = {room.id for room in vacancies}
    properties = [
        _property_summary(store, house, active, revenue_by_house, vacant_ids) for house in store.houses
    ]

    LOGGER.debug(
        "summarized_month month=%s cumulative=%s revenue=%.2f expected=%.2f vacant=%d",
        month,
        cumulative,
        total_revenue,
        total_expected,
        len(vacancies),
    )
    return MonthlySummary(
        month=month,
        revenue_policy="cumulative" if cumulative else "month",
        total_revenue=total_revenue,
        total_expected_revenue=total_expected,
        total_expenses=total_expenses,
        net_profit=total_revenue - total_expenses,
        collection_progress=progress,
        vacancies=vacancies,
        vacant_count=len(vacancies),
        active_tenant_count=len(active),
        house_count=len(store.houses),
        outstanding_items=sum(1 for item in store.lent_items if not item.is_returned),
        last_payment=store.payments[-1] if store.payments else None,
        tenants=tenants,
        properties=properties,
    )


def _property_summary(
    store: EntityStore,
    house: House,
    active: List[Tenant],
    revenue_by_house: Dict[str, float],
    vacant_ids: set,
) -> PropertySummary:
    rooms = store.rooms_of(house.id)
    vacant = sum(1 for room in rooms if room.id in vacant_ids)
    collected = float(revenue_by_house.get(house.id, 0.0))
    expenses = house.monthly_expense
    return PropertySummary(
        house_id=house.id,
        address=house.address,
        room_count=len(rooms),
        occupied=len(rooms) - vacant,
        vacant=vacant,
        expected_revenue=float(sum(t.monthly_rent for t in active if t.house_id == house.id)),
        collected=collected,
        expenses=expenses,
        net=collected - expenses,
    )
