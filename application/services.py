"""Application Services - Business use cases"""
import logging
from uuid import UUID
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import List, Optional

from domain import policies
from domain.entities import Reservation, RoomType
from domain.enums import ReservationStatus
from domain.repositories import ReservationRepository, RoomTypeRepository
from infrastructure.clock import Clock, SystemClock
from infrastructure.config import Settings, get_settings

logger = logging.getLogger(__name__)


class ReservationService:
    """Service for reservation lookups and lifecycle changes.

    Creating and rescheduling reservations goes through ``AdmissionController``.
    Cancelling only flips the status; once cancelled, occupancy reads stop
    counting the reservation.
    """

    def __init__(self,
                 repository: ReservationRepository,
                 clock: Optional[Clock] = None,
                 settings: Optional[Settings] = None):
        self.repository = repository
        self.clock = clock or SystemClock()
        self.settings = settings or get_settings()

    @property
    def cancellation_lead_time(self) -> timedelta:
        return timedelta(hours=self.settings.cancellation_lead_hours)

    async def get_reservation(self, reservation_id: UUID) -> Optional[Reservation]:
        """Get reservation by ID"""
        return await self.repository.find_by_id(reservation_id)

    async def get_reservation_by_reference(self, reference: str) -> Optional[Reservation]:
        """Get reservation by its public reference"""
        return await self.repository.find_by_reference(reference)

    async def list_reservations(
        self,
        status: Optional[ReservationStatus] = None,
        room_type_id: Optional[str] = None,
        check_in_from: Optional[date] = None,
        check_in_to: Optional[date] = None,
    ) -> List[Reservation]:
        """List reservations, newest first"""
        return await self.repository.find_all(
            status=status,
            room_type_id=room_type_id,
            check_in_from=check_in_from,
            check_in_to=check_in_to,
        )

    async def cancel_reservation(
        self,
        reservation_id: UUID,
        reason: Optional[str] = None,
        cancelled_by: Optional[str] = None,
    ) -> Optional[Reservation]:
        """Cancel reservation; raises ReservationNotCancellableError when too late or already closed"""
        reservation = await self.repository.find_by_id(reservation_id)
        if not reservation:
            return None

        cancelled = policies.cancel(
            reservation,
            now=self.clock.now(),
            reason=reason,
            cancelled_by=cancelled_by,
            lead_time=self.cancellation_lead_time,
        )
        cancelled = await self.repository.update(cancelled, expected_version=reservation.version)
        logger.info(
            "booking cancelled",
            extra={
                "extra_fields": {
                    "reservation_id": str(reservation_id),
                    "reference": reservation.reference,
                    "room_type_id": reservation.room_type_id,
                },
            },
        )
        return cancelled

    async def complete_reservation(self, reservation_id: UUID) -> Optional[Reservation]:
        """Mark a stay as completed"""
        reservation = await self.repository.find_by_id(reservation_id)
        if not reservation:
            return None

        completed = policies.complete(reservation, self.clock.now())
        return await self.repository.update(completed, expected_version=reservation.version)

    async def delete_reservation(self, reservation_id: UUID) -> bool:
        """Remove a reservation record entirely (administrative)"""
        deleted = await self.repository.delete(reservation_id)
        if deleted:
            logger.info("booking deleted", extra={"extra_fields": {"reservation_id": str(reservation_id)}})
        return deleted


class CatalogService:
    """Service for the room type catalog"""

    _EDITABLE_FIELDS = frozenset({
        "name", "description", "amenities", "nightly_rate",
        "capacity_per_unit", "total_units", "is_bookable",
    })

    def __init__(self, repository: RoomTypeRepository):
        self.repository = repository

    async def add_room_type(
        self,
        room_type_id: str,
        name: str,
        nightly_rate: Decimal,
        capacity_per_unit: int,
        total_units: int,
        description: Optional[str] = None,
        amenities: Optional[List[str]] = None,
        is_bookable: bool = True,
    ) -> RoomType:
        """Create a room type; the id must not be in use"""
        if await self.repository.find_by_id(room_type_id) is not None:
            raise ValueError(f"Room type {room_type_id} already exists")

        room_type = RoomType(
            room_type_id=room_type_id,
            name=name,
            description=description,
            amenities=amenities or [],
            nightly_rate=nightly_rate,
            capacity_per_unit=capacity_per_unit,
            total_units=total_units,
            is_bookable=is_bookable,
        )
        return await self.repository.save(room_type)

    async def get_room_type(self, room_type_id: str) -> Optional[RoomType]:
        """Get room type by ID"""
        return await self.repository.find_by_id(room_type_id)

    async def list_room_types(self, bookable_only: bool = False) -> List[RoomType]:
        """List room types ordered by name"""
        room_types = await self.repository.find_all()
        if bookable_only:
            return [rt for rt in room_types if rt.is_bookable]
        return room_types

    async def update_room_type(self, room_type_id: str, /, **changes) -> Optional[RoomType]:
        """Edit catalog attributes. Existing reservations keep their price snapshot."""
        room_type = await self.repository.find_by_id(room_type_id)
        if not room_type:
            return None

        unknown = set(changes) - self._EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        changes = {k: v for k, v in changes.items() if v is not None}
        data = room_type.model_dump()
        data.update(changes)
        data["modified_at"] = datetime.now(timezone.utc)
        data["version"] = room_type.version + 1
        # Re-validate so e.g. total_units=0 is refused
        updated = RoomType.model_validate(data)
        return await self.repository.save(updated)
