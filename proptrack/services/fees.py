"""Fee-completion status per tenant."""

from __future__ import annotations

from typing import Dict, Iterable

from ..models.dashboard import FeeStatus
from ..models.portfolio import EntityStore, Payment, PaymentPurpose, Tenant
from ..utils.dates import month_prefix


def fee_status(tenant: Tenant, payments: Iterable[Payment]) -> FeeStatus:
    """Scan a tenant's payments for holding fee, deposit and first month rent.

    First month counts as paid either through an explicit First Month Rent
    payment or a Rent payment credited to the move-in month.
    """

    move_in_month = month_prefix(tenant.move_in_date)
    holding = security = first_month = False
    for payment in payments:
        if payment.tenant_id != tenant.id:
            continue
        holding = holding or payment.has_purpose(PaymentPurpose.HOLDING_FEE)
        security = security or payment.has_purpose(PaymentPurpose.SECURITY_DEPOSIT)
        if payment.has_purpose(PaymentPurpose.FIRST_MONTH):
            first_month = True
        elif (
            move_in_month is not None
            and payment.has_purpose(PaymentPurpose.RENT)
            and payment.due_month == move_in_month
        ):
            first_month = True
    return FeeStatus(holding=holding, security=security, first_month=first_month)


def fee_statuses(store: EntityStore) -> Dict[str, FeeStatus]:
    return {tenant.id: fee_status(tenant, store.payments) for tenant in store.tenants}
