"""Pydantic models representing the portfolio records and the Entity Store."""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional, Sequence, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PaymentPurpose(str, Enum):
    RENT = "Rent"
    DAMAGES = "Damages"
    HOLDING_FEE = "Holding Fee"
    SECURITY_DEPOSIT = "Security Deposit"
    FIRST_MONTH = "First Month Rent"


RENT_PURPOSES = frozenset({PaymentPurpose.RENT, PaymentPurpose.FIRST_MONTH})


class Record(BaseModel):
    """Base for stored records: camelCase on disk, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class MaintenanceEntry(Record):
    id: str
    text: str
    date: str


class House(Record):
    id: str
    address: str
    room_count: int = Field(1, ge=1)
    mortgage_payment: float = 0.0
    bank: str = ""
    mortgage_balance: float = 0.0
    payment_date: int = 1
    insurance_amount: float = 0.0
    insurance_renewal_date: Optional[str] = None
    maintenance_log: List[MaintenanceEntry] = Field(default_factory=list)

    @property
    def monthly_expense(self) -> float:
        return self.mortgage_payment + self.insurance_amount / 12


class Room(Record):
    id: str
    house_id: str
    name: str


class Tenant(Record):
    id: str
    name: str
    phone: str = ""
    job: Optional[str] = None
    move_in_date: str = ""
    move_in_time: Optional[str] = None
    duration_months: int = 12
    move_out_date: str = ""
    security_deposit: float = 0.0
    base_rent: float = 0.0
    has_garage: bool = False
    garage_price: float = 0.0
    monthly_rent: float = 0.0
    rent_due_date: int = 1
    house_id: str = ""
    room_id: str = ""
    is_active: bool = True


class Payment(Record):
    id: str
    tenant_id: str
    house_id: str = ""
    method: str = "Transfer"
    amount: float
    date: str
    due_month: str
    purposes: List[PaymentPurpose] = Field(default_factory=list)
    is_prorated: bool = False
    prorated_days: Optional[int] = None

    def has_purpose(self, purpose: PaymentPurpose) -> bool:
        return purpose in self.purposes

    @property
    def counts_as_rent(self) -> bool:
        return any(p in RENT_PURPOSES for p in self.purposes)


class Lead(Record):
    id: str
    name: str
    phone: str = ""
    email: Optional[str] = None
    target_move_in: str = ""
    budget: float = 0.0
    house_id: str = ""
    room_id: str = ""
    has_pets: bool = False
    notes: Optional[str] = None
    created_at: str = ""
    is_active: bool = True


class Showing(Record):
    id: str
    house_id: str = ""
    room_id: str = ""
    name: str
    phone: Optional[str] = None
    job: Optional[str] = None
    showing_date: str = ""
    target_move_in: Optional[str] = None
    showed_price: float = 0.0
    offered_price: float = 0.0
    is_active: bool = True
    notes: Optional[str] = None


class LentItem(Record):
    id: str
    tenant_id: str
    item_name: str
    lent_date: str
    return_date: Optional[str] = None

    @property
    def is_returned(self) -> bool:
        return bool(self.return_date)


R = TypeVar("R", bound=Record)

# Stored collection name -> EntityStore attribute.
COLLECTIONS: Dict[str, str] = {
    "houses": "houses",
    "rooms": "rooms",
    "tenants": "tenants",
    "payments": "payments",
    "leads": "leads",
    "showings": "showings",
    "lentItems": "lent_items",
}

RECORD_TYPES: Dict[str, type] = {
    "houses": House,
    "rooms": Room,
    "tenants": Tenant,
    "payments": Payment,
    "leads": Lead,
    "showings": Showing,
    "lent_items": LentItem,
}


def collection_field(name: str) -> str:
    """Resolve a stored or attribute collection name to the EntityStore field."""

    if name in COLLECTIONS:
        return COLLECTIONS[name]
    if name in RECORD_TYPES:
        return name
    raise KeyError(f"Unknown collection: {name}")


def _find(records: Sequence[R], record_id: Optional[str]) -> Optional[R]:
    if not record_id:
        return None
    return next((r for r in records if r.id == record_id), None)


class EntityStore(Record):
    """One immutable snapshot of every collection."""

    houses: List[House] = Field(default_factory=list)
    rooms: List[Room] = Field(default_factory=list)
    tenants: List[Tenant] = Field(default_factory=list)
    payments: List[Payment] = Field(default_factory=list)
    leads: List[Lead] = Field(default_factory=list)
    showings: List[Showing] = Field(default_factory=list)
    lent_items: List[LentItem] = Field(default_factory=list)

    def find_house(self, house_id: Optional[str]) -> Optional[House]:
        return _find(self.houses, house_id)

    def find_room(self, room_id: Optional[str]) -> Optional[Room]:
        return _find(self.rooms, room_id)

    def find_tenant(self, tenant_id: Optional[str]) -> Optional[Tenant]:
        return _find(self.tenants, tenant_id)

    def find_payment(self, payment_id: Optional[str]) -> Optional[Payment]:
        return _find(self.payments, payment_id)

    def find_lead(self, lead_id: Optional[str]) -> Optional[Lead]:
        return _find(self.leads, lead_id)

    def find_showing(self, showing_id: Optional[str]) -> Optional[Showing]:
        return _find(self.showings, showing_id)

    def find_lent_item(self, item_id: Optional[str]) -> Optional[LentItem]:
        return _find(self.lent_items, item_id)

    def active_tenants(self) -> List[Tenant]:
        return [t for t in self.tenants if t.is_active]

    def rooms_of(self, house_id: str) -> List[Room]:
        return [r for r in self.rooms if r.house_id == house_id]

    def payments_of(self, tenant_id: str) -> List[Payment]:
        return [p for p in self.payments if p.tenant_id == tenant_id]

    def occupant_of(self, room_id: str, exclude_tenant_id: Optional[str] = None) -> Optional[Tenant]:
        """Active tenant holding a room, ignoring ``exclude_tenant_id``."""

        for tenant in self.tenants:
            if tenant.is_active and tenant.room_id == room_id and tenant.id != exclude_tenant_id:
                return tenant
        return None

    def with_collection(self, name: str, records: Sequence[Record]) -> "EntityStore":
        return self.model_copy(update={collection_field(name): list(records)})

    def to_blob(self) -> Dict[str, list]:
        return self.model_dump(mode="json", by_alias=True)
