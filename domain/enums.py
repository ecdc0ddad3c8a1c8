"""Domain Enums"""
from enum import Enum


class ReservationStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"

    @property
    def consumes_inventory(self) -> bool:
        return self in ACTIVE_STATUSES


# Only these statuses hold units on the dates they cover
ACTIVE_STATUSES = frozenset({ReservationStatus.PENDING, ReservationStatus.CONFIRMED})


class RejectionReason(str, Enum):
    """Closed set of business-rule rejections returned by admission"""
    ROOM_UNAVAILABLE = "ROOM_UNAVAILABLE"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    INVALID_DATE_RANGE = "INVALID_DATE_RANGE"
    UNIT_COUNT_INVALID = "UNIT_COUNT_INVALID"
    INVENTORY_CONFLICT = "INVENTORY_CONFLICT"
    RESERVATION_NOT_MODIFIABLE = "RESERVATION_NOT_MODIFIABLE"

    @property
    def code(self) -> str:
        return self.value

    @property
    def message(self) -> str:
        return _REJECTION_MESSAGES[self]


_REJECTION_MESSAGES = {
    RejectionReason.ROOM_UNAVAILABLE: "Room type not found or not available for booking",
    RejectionReason.CAPACITY_EXCEEDED: "Guest count exceeds the capacity of the requested rooms",
    RejectionReason.INVALID_DATE_RANGE: "Check-out must be after check-in and check-in cannot be in the past",
    RejectionReason.UNIT_COUNT_INVALID: "Requested number of rooms is outside the bookable range",
    RejectionReason.INVENTORY_CONFLICT: "Room is not available for selected dates. Please choose different dates.",
    RejectionReason.RESERVATION_NOT_MODIFIABLE: "Only pending or confirmed reservations can be changed",
}
