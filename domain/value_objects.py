"""Domain Value Objects"""
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Iterator, Optional, Union


DateLike = Union[date, datetime]


def to_utc_date(value: DateLike) -> date:
    """Normalize a date or datetime to its UTC calendar day"""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    return value


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield each calendar day in [start, end)"""
    current = start
    while current < end:
        yield current
        current += timedelta(days=1)


class DateRange(BaseModel):
    """Half-open stay interval: the check-out day is not occupied"""
    model_config = ConfigDict(frozen=True)

    check_in: date
    check_out: date

    @field_validator('check_in', 'check_out', mode='before')
    @classmethod
    def normalize_to_utc_day(cls, v):
        if isinstance(v, datetime):
            return to_utc_date(v)
        return v

    @field_validator('check_out')
    @classmethod
    def check_out_after_check_in(cls, v, info):
        check_in = info.data.get('check_in')
        if check_in is not None and v <= check_in:
            raise ValueError('Check-out must be after check-in')
        return v

    def nights(self) -> int:
        """Calculate number of nights"""
        return (self.check_out - self.check_in).days

    def days(self) -> Iterator[date]:
        """Occupied calendar days"""
        return iter_days(self.check_in, self.check_out)

    def contains(self, day: date) -> bool:
        return self.check_in <= day < self.check_out

    def overlaps(self, start: date, end: date) -> bool:
        return self.check_in < end and self.check_out > start

    def clip(self, start: date, end: date) -> Optional["DateRange"]:
        """Intersection with [start, end), or None when they do not overlap"""
        if not self.overlaps(start, end):
            return None
        return DateRange(check_in=max(self.check_in, start), check_out=min(self.check_out, end))


class GuestCount(BaseModel):
    """Value Object for guest count"""
    model_config = ConfigDict(frozen=True)

    guests: int = Field(ge=1)
    children: int = Field(ge=0, default=0)

    @model_validator(mode='after')
    def children_within_guests(self):
        if self.children > self.guests:
            raise ValueError('Children cannot exceed total guests')
        return self

    @property
    def adults(self) -> int:
        return self.guests - self.children


class GuestContact(BaseModel):
    """Who to reach about a reservation"""
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=2, max_length=100)
    email: str = Field(pattern=r'^\S+@\S+\.\S+$')
    phone: str = Field(min_length=1)

    @field_validator('name', 'phone')
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        return v.strip()

    @field_validator('email')
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.strip().lower()


class Pricing(BaseModel):
    """Price snapshot stored with a reservation"""
    model_config = ConfigDict(frozen=True)

    nightly_rate: Decimal = Field(ge=0)
    nights: int = Field(ge=1)
    number_of_units: int = Field(ge=1)
    base_price: Decimal = Field(ge=0)
    tax_rate: Decimal = Field(ge=0)
    tax_amount: Decimal = Field(ge=0)
    total_price: Decimal = Field(ge=0)
    currency: str = "INR"


class ConflictDetail(BaseModel):
    """Diagnostic view of an overlapping reservation, safe to show to guests"""
    model_config = ConfigDict(frozen=True)

    reference: str
    check_in: date
    check_out: date
    number_of_units: int
    status: str
