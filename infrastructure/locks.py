"""Per-room-type serialization point for check-then-insert sequences"""
import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict


class RoomTypeLocks:
    """One ``asyncio.Lock`` per room type id.

    Occupancy is read and the new reservation written while the room type's
    lock is held, so two requests for the same room type never both see the
    same free units. Requests for different room types do not wait on each
    other. Scope is a single event loop; multi-process deployments need a
    store-level conditional write instead.
    """

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}

    def _lock_for(self, room_type_id: str) -> asyncio.Lock:
        lock = self._locks.get(room_type_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[room_type_id] = lock
        return lock

    @asynccontextmanager
    async def hold(self, room_type_id: str) -> AsyncIterator[None]:
        async with self._lock_for(room_type_id):
            yield

    def is_held(self, room_type_id: str) -> bool:
        lock = self._locks.get(room_type_id)
        return lock is not None and lock.locked()
