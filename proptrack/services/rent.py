"""Monthly rent derivation for tenants and lead conversions."""

from __future__ import annotations

from typing import Optional

from ..models.portfolio import Lead, Tenant


def monthly_rent(base_rent: Optional[float], has_garage: bool, garage_price: Optional[float]) -> float:
    """Total monthly rent: base rent plus the garage price when a garage is taken."""

    base = float(base_rent or 0.0)
    garage = float(garage_price or 0.0) if has_garage else 0.0
    return base + garage


def with_monthly_rent(tenant: Tenant) -> Tenant:
    total = monthly_rent(tenant.base_rent, tenant.has_garage, tenant.garage_price)
    if tenant.monthly_rent == total:
        return tenant
    return tenant.model_copy(update={"monthly_rent": total})


def default_security_deposit(lead: Lead) -> float:
    """One month of rent at the lead's stated budget."""

    return float(lead.budget or 0.0)
