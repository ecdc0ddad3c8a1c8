"""API Schemas - Request and Response DTOs"""
from pydantic import BaseModel, Field, model_validator
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID
from typing import Dict, List, Optional

from domain.value_objects import GuestContact


# ============================================================================
# ROOM TYPE SCHEMAS
# ============================================================================

class CreateRoomTypeRequest(BaseModel):
    """Create room type request DTO"""
    room_type_id: str = Field(min_length=1, max_length=64)
    name: str = Field(min_length=1)
    description: Optional[str] = None
    amenities: List[str] = []
    nightly_rate: Decimal = Field(ge=0)
    capacity_per_unit: int = Field(ge=1)
    total_units: int = Field(ge=1)
    is_bookable: bool = True


class UpdateRoomTypeRequest(BaseModel):
    """Partial room type update DTO"""
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    amenities: Optional[List[str]] = None
    nightly_rate: Optional[Decimal] = Field(None, ge=0)
    capacity_per_unit: Optional[int] = Field(None, ge=1)
    total_units: Optional[int] = Field(None, ge=1)
    is_bookable: Optional[bool] = None


class RoomTypeResponse(BaseModel):
    """Room type response DTO"""
    room_type_id: str
    name: str
    description: Optional[str] = None
    amenities: List[str]
    nightly_rate: Decimal
    capacity_per_unit: int
    total_units: int
    is_bookable: bool
    version: int


# ============================================================================
# RESERVATION SCHEMAS
# ============================================================================

class CreateReservationRequest(BaseModel):
    """Create reservation request DTO"""
    room_type_id: str
    check_in: date
    check_out: date
    number_of_units: int = Field(ge=1, le=6, default=1)
    guests: int = Field(ge=1, le=20)
    children: int = Field(ge=0, le=20, default=0)
    guest_name: Optional[str] = Field(None, min_length=2, max_length=100)
    guest_email: Optional[str] = Field(None, pattern=r'^\S+@\S+\.\S+$')
    guest_phone: Optional[str] = Field(None, pattern=r'^[0-9]{10,15}$')
    special_requests: Optional[str] = Field(None, max_length=1000)
    created_by: str = "SYSTEM"

    @model_validator(mode='after')
    def children_within_guests(self):
        if self.children > self.guests:
            raise ValueError('Children cannot exceed total guests')
        return self

    @model_validator(mode='after')
    def contact_all_or_nothing(self):
        given = [self.guest_name, self.guest_email, self.guest_phone]
        if any(v is not None for v in given) and not all(v is not None for v in given):
            raise ValueError('guest_name, guest_email and guest_phone must be provided together')
        return self

    def contact(self) -> Optional[GuestContact]:
        if self.guest_name is None:
            return None
        return GuestContact(name=self.guest_name, email=self.guest_email, phone=self.guest_phone)


class RescheduleReservationRequest(BaseModel):
    """Change dates request DTO"""
    check_in: date
    check_out: date
    number_of_units: Optional[int] = Field(None, ge=1, le=6)


class CancelReservationRequest(BaseModel):
    """Cancel reservation request DTO"""
    reason: str = Field("Guest changed plans", max_length=500)


class PricingResponse(BaseModel):
    """Price snapshot DTO"""
    nightly_rate: Decimal
    nights: int
    number_of_units: int
    base_price: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total_price: Decimal
    currency: str


class ReservationResponse(BaseModel):
    """Reservation response DTO"""
    reservation_id: UUID
    reference: str
    room_type_id: str
    check_in: date
    check_out: date
    nights: int
    number_of_units: int
    guests: int
    children: int
    guest_name: Optional[str] = None
    status: str
    pricing: PricingResponse
    special_requests: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    created_by: str
    created_at: datetime
    modified_at: datetime
    version: int


class ConflictResponse(BaseModel):
    """Overlapping reservation shown when inventory is short"""
    reference: str
    check_in: date
    check_out: date
    number_of_units: int
    status: str


class RejectionResponse(BaseModel):
    """Business-rule rejection DTO"""
    code: str
    message: str
    conflict: Optional[ConflictResponse] = None


# ============================================================================
# AVAILABILITY SCHEMAS
# ============================================================================

class OccupancyResponse(BaseModel):
    """Units committed per day DTO"""
    room_type_id: str
    start_date: date
    end_date: date
    occupancy: Dict[date, int]


class DayAvailabilityResponse(BaseModel):
    """One calendar day DTO"""
    day: date
    booked_units: int
    available_units: int
    total_units: int
    is_available: bool


class AvailabilityCalendarResponse(BaseModel):
    """Availability calendar DTO"""
    room_type_id: str
    room_type_name: str
    total_units: int
    start_date: date
    end_date: date
    availability: List[DayAvailabilityResponse]


class UnavailableDatesResponse(BaseModel):
    """Fully booked days DTO"""
    room_type_id: str
    total_units: int
    start_date: date
    end_date: date
    unavailable_dates: List[date]
    count: int


class AvailabilityQuoteResponse(BaseModel):
    """Read-only availability preview DTO"""
    room_type_id: str
    check_in: date
    check_out: date
    total_units: int
    booked_units: int
    available_units: int
    requested_units: int
    is_available: bool
    message: str
    pricing: Optional[PricingResponse] = None


# ============================================================================
# AUTH SCHEMAS
# ============================================================================

class Token(BaseModel):
    """Token response DTO"""
    access_token: str
    token_type: str

class TokenData(BaseModel):
    """Token payload DTO"""
    username: Optional[str] = None

class UserResponse(BaseModel):
    """User response DTO"""
    user_id: UUID
    username: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    disabled: bool
