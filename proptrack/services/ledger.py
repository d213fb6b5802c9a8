"""Per-tenant payment history, receipts and display labels."""

from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional

from ..models.dashboard import MonthTotal
from ..models.portfolio import EntityStore, Payment

ARCHIVED_LABEL = "Archived"
UNKNOWN_LABEL = "Unknown"


def resident_label(store: EntityStore, tenant_id: Optional[str], fallback: str = ARCHIVED_LABEL) -> str:
    tenant = store.find_tenant(tenant_id)
    return tenant.name if tenant else fallback


def house_label(store: EntityStore, house_id: Optional[str]) -> str:
    house = store.find_house(house_id)
    return house.address if house else UNKNOWN_LABEL


def room_label(store: EntityStore, room_id: Optional[str]) -> str:
    room = store.find_room(room_id)
    return room.name if room else UNKNOWN_LABEL


def ledger_years(payments: Iterable[Payment], today: Optional[date] = None) -> List[int]:
    years = set()
    for payment in payments:
        head = payment.due_month.split("-")[0]
        if head.isdigit():
            years.add(int(head))
    if not years:
        years.add((today or date.today()).year)
    return sorted(years, reverse=True)


def tenant_year_ledger(store: EntityStore, tenant_id: str, year: int) -> List[MonthTotal]:
    """Twelve monthly totals of everything the tenant paid against ``year``."""

    payments = store.payments_of(tenant_id)
    rows = []
    for month in range(1, 13):
        key = f"{year:04d}-{month:02d}"
        matching = [p for p in payments if p.due_month == key]
        rows.append(MonthTotal(month=key, total=float(sum(p.amount for p in matching)), payment_count=len(matching)))
    return rows


def receipt_text(store: EntityStore, payment: Payment) -> str:
    amount = f"{int(payment.amount):,}" if float(payment.amount).is_integer() else f"{payment.amount:,.2f}"
    lines = [
        "PropTrack Receipt",
        f"Resident: {resident_label(store, payment.tenant_id)}",
        f"Property: {house_label(store, payment.house_id)}",
        f"Month: {payment.due_month}",
        f"Amount: ${amount}",
        f"Date: {payment.date}",
        f"For: {', '.join(p.value for p in payment.purposes)}",
    ]
    if payment.is_prorated and payment.prorated_days:
        lines.append(f"Prorated: {payment.prorated_days} days")
    return "\n".join(lines)
