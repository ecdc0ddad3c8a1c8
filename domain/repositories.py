"""Domain Repository Interfaces"""
from abc import ABC, abstractmethod
from typing import Optional, List
from uuid import UUID
from datetime import date

from domain.entities import Reservation, RoomType
from domain.enums import ReservationStatus


class RoomTypeRepository(ABC):
    """Repository interface for the room type catalog"""

    @abstractmethod
    async def save(self, room_type: RoomType) -> RoomType:
        """Insert or replace a room type"""
        pass

    @abstractmethod
    async def find_by_id(self, room_type_id: str) -> Optional[RoomType]:
        """Find room type by ID"""
        pass

    @abstractmethod
    async def find_all(self) -> List[RoomType]:
        """Find all room types"""
        pass


class ReservationRepository(ABC):
    """Repository interface for Reservation Aggregate.

    Implementations raise ``StorageUnavailable`` on infrastructure faults and
    ``DuplicateReferenceError`` when ``add`` hits an existing reference.
    """

    @abstractmethod
    async def add(self, reservation: Reservation) -> Reservation:
        """Insert a new reservation, enforcing reference uniqueness"""
        pass

    @abstractmethod
    async def update(self, reservation: Reservation, expected_version: Optional[int] = None) -> Reservation:
        """Replace a stored reservation.

        With ``expected_version`` the write only happens if the stored copy is
        still at that version, otherwise ``ConcurrentModificationError``.
        """
        pass

    @abstractmethod
    async def find_by_id(self, reservation_id: UUID) -> Optional[Reservation]:
        """Find reservation by ID"""
        pass

    @abstractmethod
    async def find_by_reference(self, reference: str) -> Optional[Reservation]:
        """Find reservation by its public reference"""
        pass

    @abstractmethod
    async def find_active_overlapping(
        self,
        room_type_id: str,
        start: date,
        end: date,
        exclude_reservation_id: Optional[UUID] = None,
    ) -> List[Reservation]:
        """Pending/confirmed reservations with check_in < end and check_out > start, earliest check-in first"""
        pass

    @abstractmethod
    async def find_all(
        self,
        status: Optional[ReservationStatus] = None,
        room_type_id: Optional[str] = None,
        check_in_from: Optional[date] = None,
        check_in_to: Optional[date] = None,
    ) -> List[Reservation]:
        """Find reservations matching the filters, newest first"""
        pass

    @abstractmethod
    async def delete(self, reservation_id: UUID) -> bool:
        """Delete reservation"""
        pass
