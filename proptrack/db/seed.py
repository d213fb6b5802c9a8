"""Seed state used on first run and after a reset."""

from __future__ import annotations

from dotenv import load_dotenv

from ..models.portfolio import EntityStore, House, MaintenanceEntry, Payment, PaymentPurpose, Room, Tenant
from ..utils.logging import get_logger

LOGGER = get_logger("db.seed")


def initial_state() -> EntityStore:
    house = House(
        id="h1",
        address="123 Maple Avenue",
        room_count=3,
        mortgage_payment=1200,
        bank="Chase",
        mortgage_balance=245000,
        payment_date=1,
        insurance_amount=150,
        insurance_renewal_date="2024-12-01",
        maintenance_log=[MaintenanceEntry(id="m1", text="Initial house inspection completed", date="2023-01-01")],
    )
    rooms = [
        Room(id="r1", house_id="h1", name="Room A"),
        Room(id="r2", house_id="h1", name="Room B"),
        Room(id="r3", house_id="h1", name="Room C"),
    ]
    tenant = Tenant(
        id="t1",
        name="John Doe",
        phone="555-0101",
        move_in_date="2023-01-01",
        duration_months=12,
        move_out_date="2023-12-31",
        security_deposit=800,
        base_rent=800,
        monthly_rent=800,
        rent_due_date=1,
        house_id="h1",
        room_id="r1",
    )
    payment = Payment(
        id="p1",
        tenant_id="t1",
        house_id="h1",
        method="Transfer",
        amount=800,
        date="2023-01-01",
        due_month="2023-01",
        purposes=[PaymentPurpose.RENT],
    )
    return EntityStore(houses=[house], rooms=rooms, tenants=[tenant], payments=[payment])


def seed() -> None:
    from .repo import get_repository

    load_dotenv()
    repo = get_repository()
    path = repo.save(initial_state())
    LOGGER.info("Seed complete path=%s", path)


if __name__ == "__main__":
    seed()
