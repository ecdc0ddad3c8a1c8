"""Reservation lifecycle rules as free functions over immutable snapshots"""
from datetime import datetime, time, timedelta, timezone
from typing import Optional

from domain.entities import Reservation
from domain.enums import ReservationStatus
from domain.errors import InvalidTransitionError, ReservationNotCancellableError
from domain.value_objects import DateRange, Pricing

DEFAULT_CANCELLATION_LEAD = timedelta(hours=24)


def check_in_instant(reservation: Reservation) -> datetime:
    """Midnight UTC of the check-in day"""
    return datetime.combine(reservation.check_in, time.min, tzinfo=timezone.utc)


def hours_until_check_in(reservation: Reservation, now: datetime) -> float:
    return (check_in_instant(reservation) - now).total_seconds() / 3600


def can_be_cancelled(
    reservation: Reservation,
    now: datetime,
    lead_time: timedelta = DEFAULT_CANCELLATION_LEAD,
) -> bool:
    """Active and strictly more than ``lead_time`` before check-in"""
    if reservation.status in (ReservationStatus.CANCELLED, ReservationStatus.COMPLETED):
        return False
    return check_in_instant(reservation) - now > lead_time


def cancel(
    reservation: Reservation,
    now: datetime,
    reason: Optional[str] = None,
    cancelled_by: Optional[str] = None,
    lead_time: timedelta = DEFAULT_CANCELLATION_LEAD,
) -> Reservation:
    if not can_be_cancelled(reservation, now, lead_time):
        if not reservation.is_active:
            message = f"Cannot cancel reservation with status {reservation.status.value}"
        else:
            hours = int(lead_time.total_seconds() // 3600)
            message = f"Booking cannot be cancelled (must be at least {hours} hours before check-in)"
        raise ReservationNotCancellableError(reservation.reservation_id, message)

    return reservation.model_copy(update={
        "status": ReservationStatus.CANCELLED,
        "cancelled_at": now,
        "cancellation_reason": reason,
        "cancelled_by": cancelled_by,
        "modified_at": now,
        "version": reservation.version + 1,
    })


def complete(reservation: Reservation, now: datetime) -> Reservation:
    if not reservation.is_active:
        raise InvalidTransitionError(
            f"Cannot complete reservation with status {reservation.status.value}"
        )
    return reservation.model_copy(update={
        "status": ReservationStatus.COMPLETED,
        "modified_at": now,
        "version": reservation.version + 1,
    })


def reschedule(
    reservation: Reservation,
    date_range: DateRange,
    number_of_units: int,
    pricing: Pricing,
    now: datetime,
) -> Reservation:
    """New dates and unit count; callers must have re-run admission first"""
    if not reservation.is_active:
        raise InvalidTransitionError(
            f"Cannot modify reservation with status {reservation.status.value}"
        )
    return reservation.model_copy(update={
        "date_range": date_range,
        "number_of_units": number_of_units,
        "pricing": pricing,
        "modified_at": now,
        "version": reservation.version + 1,
    })
