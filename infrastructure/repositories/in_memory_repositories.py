"""In-Memory Repository Implementations"""
from typing import Optional, List, Dict
from uuid import UUID
from datetime import date

from domain.repositories import ReservationRepository, RoomTypeRepository
from domain.entities import Reservation, RoomType
from domain.enums import ReservationStatus
from domain.errors import ConcurrentModificationError, DuplicateReferenceError


class InMemoryRoomTypeRepository(RoomTypeRepository):
    """In-memory implementation of RoomTypeRepository"""

    def __init__(self):
        self._storage: Dict[str, RoomType] = {}

    async def save(self, room_type: RoomType) -> RoomType:
        """Save room type to memory"""
        self._storage[room_type.room_type_id] = room_type
        return room_type

    async def find_by_id(self, room_type_id: str) -> Optional[RoomType]:
        """Find room type by ID"""
        return self._storage.get(room_type_id)

    async def find_all(self) -> List[RoomType]:
        """Find all room types"""
        return sorted(self._storage.values(), key=lambda rt: rt.name)


class InMemoryReservationRepository(ReservationRepository):
    """In-memory implementation of ReservationRepository.

    Snapshots are frozen, so handing out the stored objects is safe.
    """

    def __init__(self):
        self._storage: Dict[UUID, Reservation] = {}
        self._by_reference: Dict[str, UUID] = {}

    async def add(self, reservation: Reservation) -> Reservation:
        """Insert reservation, rejecting a reference that is already taken"""
        if reservation.reference in self._by_reference:
            raise DuplicateReferenceError(reservation.reference)
        if reservation.reservation_id in self._storage:
            raise ValueError("Reservation already exists")
        self._storage[reservation.reservation_id] = reservation
        self._by_reference[reservation.reference] = reservation.reservation_id
        return reservation

    async def update(self, reservation: Reservation, expected_version: Optional[int] = None) -> Reservation:
        """Update reservation, optionally only if nobody changed it meanwhile"""
        stored = self._storage.get(reservation.reservation_id)
        if stored is None:
            raise ValueError("Reservation not found")
        if expected_version is not None and stored.version != expected_version:
            raise ConcurrentModificationError(reservation.reservation_id, expected_version, stored.version)
        self._storage[reservation.reservation_id] = reservation
        return reservation

    async def find_by_id(self, reservation_id: UUID) -> Optional[Reservation]:
        """Find reservation by ID"""
        return self._storage.get(reservation_id)

    async def find_by_reference(self, reference: str) -> Optional[Reservation]:
        """Find reservation by reference"""
        reservation_id = self._by_reference.get(reference.upper())
        if reservation_id is None:
            return None
        return self._storage.get(reservation_id)

    async def find_active_overlapping(
        self,
        room_type_id: str,
        start: date,
        end: date,
        exclude_reservation_id: Optional[UUID] = None,
    ) -> List[Reservation]:
        """Active reservations on the room type overlapping [start, end)"""
        matches = [
            r for r in self._storage.values()
            if r.room_type_id == room_type_id
            and r.is_active
            and r.check_in < end
            and r.check_out > start
            and r.reservation_id != exclude_reservation_id
        ]
        return sorted(matches, key=lambda r: (r.check_in, r.created_at))

    async def find_all(
        self,
        status: Optional[ReservationStatus] = None,
        room_type_id: Optional[str] = None,
        check_in_from: Optional[date] = None,
        check_in_to: Optional[date] = None,
    ) -> List[Reservation]:
        """Find reservations matching the filters"""
        results = []
        for r in self._storage.values():
            if status is not None and r.status != status:
                continue
            if room_type_id is not None and r.room_type_id != room_type_id:
                continue
            if check_in_from is not None and r.check_in < check_in_from:
                continue
            if check_in_to is not None and r.check_in > check_in_to:
                continue
            results.append(r)
        return sorted(results, key=lambda r: r.created_at, reverse=True)

    async def delete(self, reservation_id: UUID) -> bool:
        """Delete reservation"""
        reservation = self._storage.pop(reservation_id, None)
        if reservation is None:
            return False
        self._by_reference.pop(reservation.reference, None)
        return True
