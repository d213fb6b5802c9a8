"""Snapshot mutations: each takes an EntityStore and returns the next one.

Nothing here touches the input snapshot. A refused mutation raises a
``PortfolioError`` subclass and the caller keeps the snapshot it had.
Mutations that target an id no longer present are logged and return the
input unchanged.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone
from typing import List, Optional, Sequence, TypeVar

from ..db.seed import initial_state
from ..models.portfolio import EntityStore, House, Lead, LentItem, MaintenanceEntry, Payment, Record, Room, Showing, Tenant
from ..utils.dates import month_prefix, today_iso
from ..utils.logging import get_logger, log_event
from .errors import StateValidationError, require_confirm
from .rent import with_monthly_rent

LOGGER = get_logger("services.portfolio")

R = TypeVar("R", bound=Record)


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def _replace(records: Sequence[R], record: R) -> List[R]:
    return [record if r.id == record.id else r for r in records]


def _without(records: Sequence[R], record_id: str) -> List[R]:
    return [r for r in records if r.id != record_id]


def _drop(store: EntityStore, field: str, record_id: str, kind: str) -> EntityStore:
    records = getattr(store, field)
    remaining = _without(records, record_id)
    if len(remaining) == len(records):
        log_event(LOGGER, f"{kind}_delete_skipped", logging.WARNING, id=record_id, reason="not_found")
        return store
    log_event(LOGGER, f"{kind}_deleted", id=record_id, remaining=len(remaining))
    return store.model_copy(update={field: remaining})


def _ensure_new(records: Sequence[Record], record_id: str, kind: str) -> None:
    if any(r.id == record_id for r in records):
        raise StateValidationError(f"{kind} {record_id} already exists")


# ---------------------------------------------------------------------------
# Houses and rooms
# ---------------------------------------------------------------------------


def room_batch(house: House) -> List[Room]:
    return [Room(id=f"r-{house.id}-{i}", house_id=house.id, name=f"Room {i + 1}") for i in range(house.room_count)]


def add_house(store: EntityStore, house: House) -> EntityStore:
    if not house.address.strip():
        raise StateValidationError("Enter an address for the property")
    _ensure_new(store.houses, house.id, "House")
    rooms = room_batch(house)
    log_event(LOGGER, "house_added", house_id=house.id, rooms=len(rooms))
    return store.model_copy(update={"houses": [*store.houses, house], "rooms": [*store.rooms, *rooms]})


def update_house(store: EntityStore, house: House) -> EntityStore:
    """Edit a house's details. Rooms and the maintenance log stay as they are."""

    current = store.find_house(house.id)
    if current is None:
        LOGGER.warning("house_update_skipped house_id=%s reason=not_found", house.id)
        return store
    if not house.address.strip():
        raise StateValidationError("Enter an address for the property")
    updated = house.model_copy(update={"room_count": current.room_count, "maintenance_log": current.maintenance_log})
    log_event(LOGGER, "house_updated", house_id=house.id)
    return store.model_copy(update={"houses": _replace(store.houses, updated)})


def delete_house(store: EntityStore, house_id: str, confirm: bool = False) -> EntityStore:
    """Remove a house and its rooms; its tenants are archived, payments kept."""

    require_confirm(confirm, "remove this property")
    if store.find_house(house_id) is None:
        LOGGER.warning("house_delete_skipped house_id=%s reason=not_found", house_id)
        return store
    tenants = [t.model_copy(update={"is_active": False}) if t.house_id == house_id else t for t in store.tenants]
    archived = sum(1 for t in store.tenants if t.house_id == house_id)
    log_event(LOGGER, "house_deleted", house_id=house_id, archived_tenants=archived)
    return store.model_copy(
        update={
            "houses": _without(store.houses, house_id),
            "rooms": [r for r in store.rooms if r.house_id != house_id],
            "tenants": tenants,
        }
    )


def add_maintenance_note(
    store: EntityStore,
    house_id: str,
    text: str,
    today: Optional[date] = None,
    note_id: Optional[str] = None,
) -> EntityStore:
    text = (text or "").strip()
    if not text:
        raise StateValidationError("Maintenance note cannot be empty")
    house = store.find_house(house_id)
    if house is None:
        LOGGER.warning("maintenance_note_skipped house_id=%s reason=not_found", house_id)
        return store
    entry = MaintenanceEntry(id=note_id or new_id("m"), text=text, date=today_iso(today))
    updated = house.model_copy(update={"maintenance_log": [entry, *house.maintenance_log]})
    return store.model_copy(update={"houses": _replace(store.houses, updated)})


def delete_maintenance_note(store: EntityStore, house_id: str, note_id: str, confirm: bool = False) -> EntityStore:
    require_confirm(confirm, "delete this maintenance record")
    house = store.find_house(house_id)
    if house is None:
        return store
    if not any(note.id == note_id for note in house.maintenance_log):
        log_event(LOGGER, "maintenance_note_delete_skipped", logging.WARNING, house_id=house_id, note_id=note_id, reason="not_found")
        return store
    updated = house.model_copy(update={"maintenance_log": _without(house.maintenance_log, note_id)})
    return store.model_copy(update={"houses": _replace(store.houses, updated)})


# ---------------------------------------------------------------------------
# Tenants
# ---------------------------------------------------------------------------


def check_placement(store: EntityStore, house_id: Optional[str], room_id: Optional[str], tenant_id: Optional[str] = None) -> None:
    """Reject a missing placement or a room another active tenant holds."""

    if not house_id or not room_id:
        raise StateValidationError("Select house and room")
    room = store.find_room(room_id)
    if room is None or room.house_id != house_id:
        raise StateValidationError(f"Room {room_id} is not part of house {house_id}")
    occupant = store.occupant_of(room_id, exclude_tenant_id=tenant_id)
    if occupant is not None:
        raise StateValidationError(f"{room.name} is already occupied by {occupant.name}")


def save_tenant(store: EntityStore, tenant: Tenant) -> EntityStore:
    """Add a tenant, or replace the stored tenant with the same id."""

    if tenant.is_active:
        check_placement(store, tenant.house_id, tenant.room_id, tenant.id)
    elif not tenant.house_id or not tenant.room_id:
        raise StateValidationError("Select house and room")
    tenant = with_monthly_rent(tenant)
    if store.find_tenant(tenant.id) is not None:
        log_event(LOGGER, "tenant_updated", tenant_id=tenant.id, monthly_rent=tenant.monthly_rent)
        return store.model_copy(update={"tenants": _replace(store.tenants, tenant)})
    log_event(LOGGER, "tenant_added", tenant_id=tenant.id, monthly_rent=tenant.monthly_rent)
    return store.model_copy(update={"tenants": [*store.tenants, tenant]})


def set_tenant_active(store: EntityStore, tenant_id: str, active: bool, confirm: bool = False) -> EntityStore:
    require_confirm(confirm, "reactivate this tenant" if active else "archive this tenant")
    tenant = store.find_tenant(tenant_id)
    if tenant is None:
        LOGGER.warning("tenant_toggle_skipped tenant_id=%s reason=not_found", tenant_id)
        return store
    if active and tenant.room_id:
        occupant = store.occupant_of(tenant.room_id, exclude_tenant_id=tenant.id)
        if occupant is not None:
            raise StateValidationError(f"Room is already occupied by {occupant.name}")
    updated = tenant.model_copy(update={"is_active": active})
    return store.model_copy(update={"tenants": _replace(store.tenants, updated)})


def delete_tenant(store: EntityStore, tenant_id: str, confirm: bool = False) -> EntityStore:
    require_confirm(confirm, "permanently delete this tenant")
    return _drop(store, "tenants", tenant_id, "tenant")


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------


def record_payment(store: EntityStore, payment: Payment) -> EntityStore:
    tenant = store.find_tenant(payment.tenant_id)
    if tenant is None:
        raise StateValidationError("Select a resident for this payment")
    if not payment.amount or payment.amount <= 0:
        raise StateValidationError("Payment amount must be greater than zero")
    if not payment.purposes:
        raise StateValidationError("Select at least one payment purpose")
    if month_prefix(payment.due_month) != payment.due_month:
        raise StateValidationError(f"Due month must look like YYYY-MM, got {payment.due_month!r}")
    _ensure_new(store.payments, payment.id, "Payment")
    payment = payment.model_copy(update={"house_id": tenant.house_id})
    log_event(
        LOGGER,
        "payment_recorded",
        payment_id=payment.id,
        tenant_id=payment.tenant_id,
        due_month=payment.due_month,
        amount=float(payment.amount),
    )
    return store.model_copy(update={"payments": [*store.payments, payment]})


def delete_payment(store: EntityStore, payment_id: str, confirm: bool = False) -> EntityStore:
    require_confirm(confirm, "delete this payment")
    return _drop(store, "payments", payment_id, "payment")


# ---------------------------------------------------------------------------
# Leads and showings
# ---------------------------------------------------------------------------


def add_lead(store: EntityStore, lead: Lead) -> EntityStore:
    if not lead.name.strip():
        raise StateValidationError("Enter a name for the lead")
    _ensure_new(store.leads, lead.id, "Lead")
    created_at = lead.created_at or datetime.now(timezone.utc).isoformat()
    lead = lead.model_copy(update={"created_at": created_at, "is_active": True})
    return store.model_copy(update={"leads": [*store.leads, lead]})


def set_lead_active(store: EntityStore, lead_id: str, active: bool, confirm: bool = False) -> EntityStore:
    require_confirm(confirm, "reactivate this lead" if active else "archive this lead")
    lead = store.find_lead(lead_id)
    if lead is None:
        return store
    return store.model_copy(update={"leads": _replace(store.leads, lead.model_copy(update={"is_active": active}))})


def delete_lead(store: EntityStore, lead_id: str, confirm: bool = False) -> EntityStore:
    require_confirm(confirm, "permanently delete this lead")
    return _drop(store, "leads", lead_id, "lead")


def add_showing(store: EntityStore, showing: Showing) -> EntityStore:
    if not showing.name.strip():
        raise StateValidationError("Enter the prospect's name")
    _ensure_new(store.showings, showing.id, "Showing")
    showing = showing.model_copy(update={"is_active": True})
    return store.model_copy(update={"showings": [*store.showings, showing]})


def set_showing_active(store: EntityStore, showing_id: str, active: bool, confirm: bool = False) -> EntityStore:
    require_confirm(confirm, "reactivate this showing" if active else "archive this showing")
    showing = store.find_showing(showing_id)
    if showing is None:
        return store
    updated = showing.model_copy(update={"is_active": active})
    return store.model_copy(update={"showings": _replace(store.showings, updated)})


def delete_showing(store: EntityStore, showing_id: str, confirm: bool = False) -> EntityStore:
    require_confirm(confirm, "permanently remove this showing")
    return _drop(store, "showings", showing_id, "showing")


# ---------------------------------------------------------------------------
# Lent items
# ---------------------------------------------------------------------------


def lend_item(store: EntityStore, item: LentItem) -> EntityStore:
    if not item.item_name.strip():
        raise StateValidationError("Enter the item name")
    if store.find_tenant(item.tenant_id) is None:
        raise StateValidationError("Select the resident borrowing the item")
    _ensure_new(store.lent_items, item.id, "Item")
    return store.model_copy(update={"lent_items": [*store.lent_items, item]})


def return_item(store: EntityStore, item_id: str, today: Optional[date] = None) -> EntityStore:
    item = store.find_lent_item(item_id)
    if item is None:
        return store
    updated = item.model_copy(update={"return_date": today_iso(today)})
    return store.model_copy(update={"lent_items": _replace(store.lent_items, updated)})


def delete_lent_item(store: EntityStore, item_id: str, confirm: bool = False) -> EntityStore:
    require_confirm(confirm, "permanently delete this item record")
    return _drop(store, "lent_items", item_id, "lent_item")


def reset_state(store: EntityStore, confirm: bool = False) -> EntityStore:
    require_confirm(confirm, "delete all houses, tenants, payments and records")
    LOGGER.warning("state_reset houses=%d tenants=%d payments=%d", len(store.houses), len(store.tenants), len(store.payments))
    return initial_state()
