from proptrack.models.portfolio import EntityStore, Payment, PaymentPurpose, Tenant
from proptrack.services.fees import fee_status, fee_statuses


def _tenant(move_in: str = "2024-03-15") -> Tenant:
    return Tenant(id="t1", name="Ada", move_in_date=move_in, house_id="h1", room_id="r1", base_rent=800, monthly_rent=800)


def _payment(purposes, due_month="2024-03", tenant_id="t1", pid="p1") -> Payment:
    return Payment(id=pid, tenant_id=tenant_id, amount=800, date="2024-03-01", due_month=due_month, purposes=purposes)


def test_no_payments_means_nothing_paid():
    status = fee_status(_tenant(), [])
    assert (status.holding, status.security, status.first_month) == (False, False, False)


def test_rent_in_move_in_month_counts_as_first_month():
    status = fee_status(_tenant(), [_payment([PaymentPurpose.RENT], due_month="2024-03")])
    assert status.first_month is True
    assert status.holding is False


def test_rent_for_a_later_month_is_not_first_month():
    status = fee_status(_tenant(), [_payment([PaymentPurpose.RENT], due_month="2024-04")])
    assert status.first_month is False


def test_explicit_first_month_purpose_counts_for_any_month():
    status = fee_status(_tenant(), [_payment([PaymentPurpose.FIRST_MONTH], due_month="2024-09")])
    assert status.first_month is True


def test_holding_and_security_from_multi_purpose_payment():
    payment = _payment([PaymentPurpose.HOLDING_FEE, PaymentPurpose.SECURITY_DEPOSIT], due_month="2024-02")
    status = fee_status(_tenant(), [payment])
    assert status.holding is True
    assert status.security is True
    assert status.first_month is False


def test_other_tenants_payments_are_ignored():
    payment = _payment([PaymentPurpose.HOLDING_FEE, PaymentPurpose.FIRST_MONTH], tenant_id="t2")
    status = fee_status(_tenant(), [payment])
    assert not (status.holding or status.first_month)


def test_malformed_move_in_date_is_no_match():
    status = fee_status(_tenant(move_in="soon"), [_payment([PaymentPurpose.RENT], due_month="2024-03")])
    assert status.first_month is False
    status = fee_status(_tenant(move_in=""), [_payment([PaymentPurpose.RENT], due_month="2024-03")])
    assert status.first_month is False


def test_fee_statuses_covers_every_tenant():
    store = EntityStore(
        tenants=[_tenant(), Tenant(id="t2", name="Bo", move_in_date="2024-01-01")],
        payments=[_payment([PaymentPurpose.SECURITY_DEPOSIT], tenant_id="t2")],
    )
    statuses = fee_statuses(store)
    assert set(statuses) == {"t1", "t2"}
    assert statuses["t2"].security is True
    assert statuses["t1"].security is False
