"""Turn a lead into a tenant."""

from __future__ import annotations

from typing import List, Optional, Tuple

from ..models.dashboard import ConversionForm, RoomOption
from ..models.portfolio import EntityStore, Lead, Tenant
from ..utils.logging import get_logger, log_event
from .errors import StateValidationError
from .portfolio import check_placement, new_id
from .rent import default_security_deposit, monthly_rent

LOGGER = get_logger("services.conversion")


def start_conversion(lead: Lead) -> ConversionForm:
    """Prefill lease terms from what the lead told us."""

    return ConversionForm(
        name=lead.name,
        phone=lead.phone,
        house_id=lead.house_id,
        room_id=lead.room_id,
        move_in_date=lead.target_move_in,
        base_rent=lead.budget,
        security_deposit=default_security_deposit(lead),
    )


def room_options(store: EntityStore, house_id: str, exclude_tenant_id: Optional[str] = None) -> List[RoomOption]:
    options = []
    for room in store.rooms_of(house_id):
        occupant = store.occupant_of(room.id, exclude_tenant_id=exclude_tenant_id)
        options.append(RoomOption(room=room, occupied=occupant is not None, occupant_id=occupant.id if occupant else None))
    return options


def build_tenant(lead: Lead, form: ConversionForm, tenant_id: Optional[str] = None) -> Tenant:
    base_rent = form.base_rent if form.base_rent is not None else lead.budget
    deposit = form.security_deposit if form.security_deposit is not None else default_security_deposit(lead)
    return Tenant(
        id=tenant_id or new_id("t"),
        name=form.name or lead.name,
        phone=form.phone if form.phone is not None else lead.phone,
        job=form.job,
        move_in_date=form.move_in_date if form.move_in_date is not None else lead.target_move_in,
        move_in_time=form.move_in_time,
        duration_months=form.duration_months,
        move_out_date=form.move_out_date,
        security_deposit=deposit,
        base_rent=base_rent,
        has_garage=form.has_garage,
        garage_price=form.garage_price,
        monthly_rent=monthly_rent(base_rent, form.has_garage, form.garage_price),
        rent_due_date=form.rent_due_date,
        house_id=form.house_id or lead.house_id,
        room_id=form.room_id or lead.room_id,
        is_active=True,
    )


def convert_lead(
    store: EntityStore,
    lead_id: str,
    form: Optional[ConversionForm] = None,
    tenant_id: Optional[str] = None,
) -> Tuple[EntityStore, Tenant]:
    """Append the new tenant and archive the lead in a single snapshot.

    Either both changes are in the returned snapshot or an error is raised and
    the caller still holds the untouched input.
    """

    lead = store.find_lead(lead_id)
    if lead is None:
        raise StateValidationError(f"Lead {lead_id} not found")
    if not lead.is_active:
        raise StateValidationError(f"Lead {lead_id} is archived")
    tenant = build_tenant(lead, form or start_conversion(lead), tenant_id=tenant_id)
    check_placement(store, tenant.house_id, tenant.room_id)
    if store.find_tenant(tenant.id) is not None:
        raise StateValidationError(f"Tenant {tenant.id} already exists")

    leads = [l.model_copy(update={"is_active": False}) if l.id == lead.id else l for l in store.leads]
    next_state = store.model_copy(update={"tenants": [*store.tenants, tenant], "leads": leads})
    log_event(
        LOGGER,
        "lead_converted",
        lead_id=lead.id,
        tenant_id=tenant.id,
        room_id=tenant.room_id,
        monthly_rent=float(tenant.monthly_rent),
    )
    return next_state, tenant
