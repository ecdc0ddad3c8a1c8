"""Admission control: decide whether a stay fits the inventory and persist it if so.

The decision itself is day-by-day: occupancy over the requested stay is
tallied, the busiest day sets how many units are free, and the request is
accepted only if that many are still available. The read and the write happen
while the room type's lock is held so two requests cannot both take the last
unit.
"""
import logging
from datetime import date
from typing import Callable, List, Optional
from uuid import UUID

from domain import policies
from domain.decisions import Accepted, Decision, Rejected
from domain.entities import Reservation, RoomType
from domain.enums import RejectionReason, ReservationStatus
from domain.errors import DuplicateReferenceError, ReferenceGenerationFailed, StorageUnavailable
from domain.occupancy import earliest_conflict, peak_occupancy, tally_daily_occupancy
from domain.pricing import compute_price
from domain.references import generate_reference
from domain.repositories import ReservationRepository, RoomTypeRepository
from domain.value_objects import DateLike, DateRange, GuestContact, GuestCount, to_utc_date
from infrastructure.clock import Clock, SystemClock
from infrastructure.config import Settings, get_settings
from infrastructure.locks import RoomTypeLocks
from infrastructure.notifications import LoggingNotificationSender, NotificationSender

logger = logging.getLogger(__name__)


class AdmissionController:
    """Accepts or rejects booking requests without ever overcommitting a room type"""

    def __init__(self,
                 room_type_repo: RoomTypeRepository,
                 reservation_repo: ReservationRepository,
                 locks: Optional[RoomTypeLocks] = None,
                 clock: Optional[Clock] = None,
                 notifier: Optional[NotificationSender] = None,
                 settings: Optional[Settings] = None,
                 reference_factory: Optional[Callable[[], str]] = None):
        self.room_type_repo = room_type_repo
        self.reservation_repo = reservation_repo
        self.locks = locks or RoomTypeLocks()
        self.clock = clock or SystemClock()
        self.notifier = notifier or LoggingNotificationSender()
        self.settings = settings or get_settings()
        self.reference_factory = reference_factory or self._default_reference

    def _default_reference(self) -> str:
        return generate_reference(self.settings.reference_prefix, self.clock.now())

    # ==================== ADMISSION ====================
    async def evaluate_booking_request(
        self,
        room_type_id: str,
        check_in: DateLike,
        check_out: DateLike,
        requested_units: int,
        guest_count: int,
        child_count: int = 0,
        contact: Optional[GuestContact] = None,
        special_requests: Optional[str] = None,
        created_by: str = "SYSTEM",
    ) -> Decision:
        """Run the admission checks in order and persist the reservation when accepted.

        Business-rule failures come back as ``Rejected``. ``StorageUnavailable``
        and ``ReferenceGenerationFailed`` are raised; in both cases nothing was
        written.
        """
        start, end = to_utc_date(check_in), to_utc_date(check_out)

        room_type = await self.room_type_repo.find_by_id(room_type_id)
        rejection = (
            self._check_room_type(room_type)
            or self._check_capacity(room_type, guest_count, child_count, requested_units)
            or self._check_dates(start, end)
            or self._check_unit_count(room_type, requested_units)
        )
        if rejection is not None:
            self._log_rejection(rejection, room_type_id, start, end, requested_units)
            return rejection

        async with self.locks.hold(room_type_id):
            committed = await self.reservation_repo.find_active_overlapping(room_type_id, start, end)
            rejection = self._check_inventory(room_type, committed, start, end, requested_units)
            if rejection is not None:
                self._log_rejection(rejection, room_type_id, start, end, requested_units)
                return rejection

            pricing = compute_price(
                room_type.nightly_rate, start, end, requested_units,
                tax_rate=self.settings.tax_rate,
                currency=self.settings.currency,
            )
            reservation = await self._insert_with_unique_reference(
                room_type_id=room_type_id,
                date_range=DateRange(check_in=start, check_out=end),
                number_of_units=requested_units,
                guest_count=GuestCount(guests=guest_count, children=child_count),
                contact=contact,
                special_requests=special_requests,
                status=ReservationStatus.CONFIRMED,
                pricing=pricing,
                created_by=created_by,
            )

        logger.info(
            "booking admitted",
            extra={
                "extra_fields": {
                    "reservation_id": str(reservation.reservation_id),
                    "reference": reservation.reference,
                    "room_type_id": room_type_id,
                    "check_in": start.isoformat(),
                    "check_out": end.isoformat(),
                    "number_of_units": requested_units,
                    "total_price": str(pricing.total_price),
                },
            },
        )
        await self._notify(reservation, room_type)
        return Accepted(reservation=reservation, pricing=pricing)

    async def reschedule_reservation(
        self,
        reservation_id: UUID,
        check_in: DateLike,
        check_out: DateLike,
        number_of_units: Optional[int] = None,
    ) -> Optional[Decision]:
        """Move a reservation to new dates (and optionally a new unit count).

        The reservation's own units are left out of the occupancy tally. The
        price is recomputed from the reservation's snapshot nightly rate, not
        the room type's current rate.
        """
        current = await self.reservation_repo.find_by_id(reservation_id)
        if current is None:
            return None

        start, end = to_utc_date(check_in), to_utc_date(check_out)
        units = number_of_units if number_of_units is not None else current.number_of_units
        room_type = await self.room_type_repo.find_by_id(current.room_type_id)

        rejection = (
            self._check_modifiable(current)
            or self._check_room_type(room_type)
            or self._check_capacity(room_type, current.guest_count.guests, current.guest_count.children, units)
            or self._check_dates(start, end)
            or self._check_unit_count(room_type, units)
        )
        if rejection is not None:
            self._log_rejection(rejection, current.room_type_id, start, end, units)
            return rejection

        async with self.locks.hold(current.room_type_id):
            # Re-read under the lock; it may have been cancelled meanwhile
            current = await self.reservation_repo.find_by_id(reservation_id)
            if current is None:
                return None
            rejection = self._check_modifiable(current)
            if rejection is None:
                committed = await self.reservation_repo.find_active_overlapping(
                    current.room_type_id, start, end, exclude_reservation_id=reservation_id
                )
                rejection = self._check_inventory(room_type, committed, start, end, units)
            if rejection is not None:
                self._log_rejection(rejection, current.room_type_id, start, end, units)
                return rejection

            pricing = compute_price(
                current.pricing.nightly_rate, start, end, units,
                tax_rate=self.settings.tax_rate,
                currency=current.pricing.currency,
            )
            updated = policies.reschedule(
                current, DateRange(check_in=start, check_out=end), units, pricing, self.clock.now()
            )
            updated = await self.reservation_repo.update(updated, expected_version=current.version)

        logger.info(
            "booking rescheduled",
            extra={
                "extra_fields": {
                    "reservation_id": str(reservation_id),
                    "room_type_id": current.room_type_id,
                    "check_in": start.isoformat(),
                    "check_out": end.isoformat(),
                    "number_of_units": units,
                },
            },
        )
        return Accepted(reservation=updated, pricing=pricing)

    # ==================== CHECKS ====================
    @staticmethod
    def _check_room_type(room_type: Optional[RoomType]) -> Optional[Rejected]:
        if room_type is None or not room_type.is_bookable:
            return Rejected.because(RejectionReason.ROOM_UNAVAILABLE)
        return None

    @staticmethod
    def _check_capacity(room_type: RoomType, guest_count: int, child_count: int,
                        requested_units: int) -> Optional[Rejected]:
        if guest_count < 1 or child_count < 0 or child_count > guest_count:
            return Rejected.because(
                RejectionReason.CAPACITY_EXCEEDED,
                "At least 1 guest is required and children cannot exceed total guests",
            )
        if guest_count > room_type.max_guests(requested_units):
            return Rejected.because(
                RejectionReason.CAPACITY_EXCEEDED,
                f"{guest_count} guests exceed the capacity of {requested_units} room(s) "
                f"(max {room_type.capacity_per_unit} per room)",
            )
        return None

    def _check_dates(self, start: date, end: date) -> Optional[Rejected]:
        if end <= start:
            return Rejected.because(RejectionReason.INVALID_DATE_RANGE, "Check-out date must be after check-in date")
        if start < self.clock.today():
            return Rejected.because(RejectionReason.INVALID_DATE_RANGE, "Check-in date cannot be in the past")
        return None

    @staticmethod
    def _check_unit_count(room_type: RoomType, requested_units: int) -> Optional[Rejected]:
        if requested_units < 1 or requested_units > room_type.total_units:
            return Rejected.because(
                RejectionReason.UNIT_COUNT_INVALID,
                f"Number of rooms must be between 1 and {room_type.total_units}",
            )
        return None

    @staticmethod
    def _check_modifiable(reservation: Reservation) -> Optional[Rejected]:
        if not reservation.is_active:
            return Rejected.because(RejectionReason.RESERVATION_NOT_MODIFIABLE)
        return None

    @staticmethod
    def _check_inventory(room_type: RoomType, committed: List[Reservation], start: date, end: date,
                         requested_units: int) -> Optional[Rejected]:
        """Reject unless the busiest day of the stay still has requested_units free"""
        occupancy = tally_daily_occupancy(committed, start, end)
        available = room_type.total_units - peak_occupancy(occupancy)
        if available >= requested_units:
            return None

        conflict = earliest_conflict(committed)
        return Rejected.because(
            RejectionReason.INVENTORY_CONFLICT,
            conflict_detail=conflict.to_conflict_detail() if conflict is not None else None,
        )

    # ==================== PERSISTENCE ====================
    async def _insert_with_unique_reference(self, **fields) -> Reservation:
        attempts = self.settings.reference_max_attempts
        for attempt in range(1, attempts + 1):
            reservation = Reservation(reference=self.reference_factory(), **fields)
            try:
                return await self.reservation_repo.add(reservation)
            except DuplicateReferenceError as e:
                logger.warning(
                    "reservation reference collision",
                    extra={"extra_fields": {"reference": e.reference, "attempt": attempt}},
                )
            except StorageUnavailable:
                logger.error(
                    "reservation insert failed",
                    extra={"extra_fields": {"room_type_id": fields["room_type_id"]}},
                )
                raise
        raise ReferenceGenerationFailed(attempts)

    async def _notify(self, reservation: Reservation, room_type: RoomType) -> None:
        try:
            await self.notifier.send_booking_confirmation(reservation, room_type)
        except Exception:
            logger.exception(
                "booking notification failed",
                extra={"extra_fields": {"reference": reservation.reference}},
            )

    @staticmethod
    def _log_rejection(rejection: Rejected, room_type_id: str, start: date, end: date, units: int) -> None:
        fields = {
            "room_type_id": room_type_id,
            "reason": rejection.code,
            "check_in": start.isoformat(),
            "check_out": end.isoformat(),
            "requested_units": units,
        }
        if rejection.conflict_detail is not None:
            fields["conflicting_reference"] = rejection.conflict_detail.reference
        level = logging.WARNING if rejection.reason == RejectionReason.INVENTORY_CONFLICT else logging.INFO
        logger.log(level, "booking rejected", extra={"extra_fields": fields})
