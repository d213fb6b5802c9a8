"""Pydantic schemas for derived ledger, occupancy and timeline responses."""

from __future__ import annotations

from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .portfolio import Payment, Room


class CollectionStatus(str, Enum):
    PAID = "paid"
    PARTIAL = "partial"
    UNPAID = "unpaid"


class FeeStatus(BaseModel):
    holding: bool = False
    security: bool = False
    first_month: bool = False


class TenantCollection(BaseModel):
    tenant_id: str
    name: str
    house_id: str
    room_id: str
    monthly_rent: float
    collected: float
    status: CollectionStatus


class PropertySummary(BaseModel):
    house_id: str
    address: str
    room_count: int
    occupied: int
    vacant: int
    expected_revenue: float
    collected: float
    expenses: float
    net: float


class MonthlySummary(BaseModel):
    month: str
    revenue_policy: Literal["month", "cumulative"] = "month"
    total_revenue: float
    total_expected_revenue: float
    total_expenses: float
    net_profit: float
    collection_progress: float
    vacancies: List[Room]
    vacant_count: int
    active_tenant_count: int
    house_count: int
    outstanding_items: int
    last_payment: Optional[Payment] = None
    tenants: List[TenantCollection] = Field(default_factory=list)
    properties: List[PropertySummary] = Field(default_factory=list)


class MonthTotal(BaseModel):
    month: str
    total: float
    payment_count: int


class RoomOption(BaseModel):
    room: Room
    occupied: bool
    occupant_id: Optional[str] = None


class ConversionForm(BaseModel):
    """Lease terms entered while turning a lead into a tenant.

    Unset identity and placement fields fall back to the lead; an unset
    security deposit falls back to one month of the lead's budget.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: Optional[str] = None
    phone: Optional[str] = None
    job: Optional[str] = None
    house_id: Optional[str] = None
    room_id: Optional[str] = None
    move_in_date: Optional[str] = None
    move_in_time: str = "10:00"
    duration_months: int = 12
    move_out_date: str = ""
    base_rent: Optional[float] = None
    has_garage: bool = False
    garage_price: float = 0.0
    security_deposit: Optional[float] = None
    rent_due_date: int = 1


EventKind = Literal["move-in", "lease-end", "insurance-renewal", "rent-due"]
MarkerStatus = Literal["paid", "unpaid", "info"]


class TimelineEvent(BaseModel):
    kind: EventKind
    date: str
    house_id: str
    label: str
    tenant_id: Optional[str] = None
    due_month: Optional[str] = None
    status: Optional[CollectionStatus] = None


class TimelineMarker(BaseModel):
    date: str
    house_id: str
    address: str
    position: float
    status: MarkerStatus
    events: List[TimelineEvent]


class Timeline(BaseModel):
    window_start: str
    window_end: str
    today: str
    month_offset: int = 0
    today_position: Optional[float] = None
    event_count: int
    marker_size: float
    markers: List[TimelineMarker]
