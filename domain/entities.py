"""Domain Entities - Aggregates"""
from pydantic import BaseModel, ConfigDict, Field
from uuid import UUID, uuid4
from datetime import datetime, timezone
from typing import Optional, List
from decimal import Decimal

from domain.enums import ReservationStatus
from domain.value_objects import DateRange, GuestCount, GuestContact, Pricing, ConflictDetail


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RoomType(BaseModel):
    """Catalog entry: one bookable category backed by total_units identical rooms"""
    model_config = ConfigDict(frozen=True, from_attributes=True)

    # Identity
    room_type_id: str = Field(min_length=1)

    # Display attributes (never used as lookup keys)
    name: str = Field(min_length=1)
    description: Optional[str] = None
    amenities: List[str] = Field(default_factory=list)

    # Inventory and pricing
    nightly_rate: Decimal = Field(ge=0)
    capacity_per_unit: int = Field(ge=1)
    total_units: int = Field(ge=1)
    is_bookable: bool = True

    # Metadata
    created_at: datetime = Field(default_factory=_utcnow)
    modified_at: datetime = Field(default_factory=_utcnow)
    version: int = 1

    def max_guests(self, units: int) -> int:
        return self.capacity_per_unit * units


class Reservation(BaseModel):
    """Reservation Aggregate snapshot.

    Instances are immutable. Lifecycle changes go through the functions in
    ``domain.policies`` which hand back a new snapshot with ``version`` bumped.
    """
    model_config = ConfigDict(frozen=True, from_attributes=True)

    # Identity
    reservation_id: UUID = Field(default_factory=uuid4)
    reference: str

    # Inventory being consumed
    room_type_id: str
    date_range: DateRange
    number_of_units: int = Field(ge=1)

    # Guests
    guest_count: GuestCount
    contact: Optional[GuestContact] = None
    special_requests: Optional[str] = Field(default=None, max_length=1000)

    # Status and price snapshot
    status: ReservationStatus = ReservationStatus.CONFIRMED
    pricing: Pricing

    # Cancellation
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = Field(default=None, max_length=500)
    cancelled_by: Optional[str] = None

    # Metadata
    created_by: str = "SYSTEM"
    created_at: datetime = Field(default_factory=_utcnow)
    modified_at: datetime = Field(default_factory=_utcnow)
    version: int = 1

    @property
    def check_in(self):
        return self.date_range.check_in

    @property
    def check_out(self):
        return self.date_range.check_out

    @property
    def is_active(self) -> bool:
        return self.status.consumes_inventory

    def nights(self) -> int:
        return self.date_range.nights()

    def to_conflict_detail(self) -> ConflictDetail:
        return ConflictDetail(
            reference=self.reference,
            check_in=self.check_in,
            check_out=self.check_out,
            number_of_units=self.number_of_units,
            status=self.status.value,
        )
