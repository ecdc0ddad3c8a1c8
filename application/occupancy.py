"""Occupancy aggregation and the read-only availability views built on it"""
import logging
from datetime import date, timedelta
from typing import Dict, List, Optional

from pydantic import BaseModel

from domain.entities import RoomType
from domain.occupancy import peak_occupancy, tally_daily_occupancy
from domain.pricing import compute_price
from domain.repositories import ReservationRepository, RoomTypeRepository
from domain.value_objects import DateLike, Pricing, to_utc_date
from infrastructure.clock import Clock, SystemClock
from infrastructure.config import Settings, get_settings

logger = logging.getLogger(__name__)


class DayAvailability(BaseModel):
    day: date
    booked_units: int
    available_units: int
    total_units: int
    is_available: bool


class AvailabilityQuote(BaseModel):
    room_type_id: str
    check_in: date
    check_out: date
    total_units: int
    booked_units: int
    available_units: int
    requested_units: int
    is_available: bool
    message: str
    pricing: Optional[Pricing] = None


class OccupancyService:
    """Reads committed units per day for a room type.

    Every call goes to the reservation store; nothing is cached between
    requests. None of these methods may be used to decide whether to create
    a reservation; that goes through ``AdmissionController``.
    """

    def __init__(self,
                 reservation_repo: ReservationRepository,
                 room_type_repo: RoomTypeRepository,
                 clock: Optional[Clock] = None,
                 settings: Optional[Settings] = None):
        self.reservation_repo = reservation_repo
        self.room_type_repo = room_type_repo
        self.clock = clock or SystemClock()
        self.settings = settings or get_settings()

    async def compute_daily_occupancy(
        self,
        room_type_id: str,
        window_start: DateLike,
        window_end: DateLike,
    ) -> Dict[date, int]:
        """Units committed by pending/confirmed reservations on each day of [start, end)"""
        start, end = to_utc_date(window_start), to_utc_date(window_end)
        if end < start:
            raise ValueError("Window end must not be before window start")
        if (end - start).days > self.settings.max_window_days:
            raise ValueError(f"Window cannot span more than {self.settings.max_window_days} days")
        if end == start:
            return {}

        reservations = await self.reservation_repo.find_active_overlapping(room_type_id, start, end)
        return tally_daily_occupancy(reservations, start, end)

    async def _bookable_room_type(self, room_type_id: str) -> Optional[RoomType]:
        room_type = await self.room_type_repo.find_by_id(room_type_id)
        if room_type is None or not room_type.is_bookable:
            return None
        return room_type

    async def availability_calendar(
        self,
        room_type_id: str,
        start: Optional[DateLike] = None,
        days: Optional[int] = None,
    ) -> Optional[List[DayAvailability]]:
        """Day-by-day free units for a calendar display"""
        room_type = await self._bookable_room_type(room_type_id)
        if room_type is None:
            return None

        start_day = to_utc_date(start) if start is not None else self.clock.today()
        days = days or self.settings.calendar_days
        occupancy = await self.compute_daily_occupancy(
            room_type_id, start_day, start_day + timedelta(days=days)
        )

        calendar = []
        for day, booked in occupancy.items():
            available = max(0, room_type.total_units - booked)
            calendar.append(DayAvailability(
                day=day,
                booked_units=booked,
                available_units=available,
                total_units=room_type.total_units,
                is_available=available > 0,
            ))
        return calendar

    async def unavailable_dates(
        self,
        room_type_id: str,
        start: Optional[DateLike] = None,
        end: Optional[DateLike] = None,
    ) -> Optional[List[date]]:
        """Days on which every unit of the room type is taken"""
        room_type = await self._bookable_room_type(room_type_id)
        if room_type is None:
            return None

        start_day = to_utc_date(start) if start is not None else self.clock.today()
        if end is not None:
            end_day = to_utc_date(end)
        else:
            end_day = start_day + timedelta(days=self.settings.unavailable_dates_days)

        occupancy = await self.compute_daily_occupancy(room_type_id, start_day, end_day)
        return [day for day, booked in occupancy.items() if booked >= room_type.total_units]

    async def check_availability(
        self,
        room_type_id: str,
        check_in: DateLike,
        check_out: DateLike,
        requested_units: int = 1,
    ) -> Optional[AvailabilityQuote]:
        """Preview how many units are free over a stay without booking anything.

        The quote carries the price the stay would cost at today's rate; the
        admitted reservation is priced again at booking time.
        """
        room_type = await self._bookable_room_type(room_type_id)
        if room_type is None:
            return None

        start, end = to_utc_date(check_in), to_utc_date(check_out)
        if end <= start:
            raise ValueError("Check-out date must be after check-in date")

        occupancy = await self.compute_daily_occupancy(room_type_id, start, end)
        booked = peak_occupancy(occupancy)
        available = max(0, room_type.total_units - booked)
        is_available = available >= requested_units

        if is_available:
            message = f"{available} of {room_type.total_units} rooms available for selected dates"
        else:
            message = f"Only {available} rooms available, but {requested_units} requested"

        logger.debug(
            "availability checked",
            extra={
                "extra_fields": {
                    "room_type_id": room_type_id,
                    "check_in": start.isoformat(),
                    "check_out": end.isoformat(),
                    "booked_units": booked,
                    "requested_units": requested_units,
                },
            },
        )

        return AvailabilityQuote(
            room_type_id=room_type_id,
            check_in=start,
            check_out=end,
            total_units=room_type.total_units,
            booked_units=booked,
            available_units=available,
            requested_units=requested_units,
            is_available=is_available,
            message=message,
            pricing=compute_price(
                room_type.nightly_rate, start, end, requested_units,
                tax_rate=self.settings.tax_rate,
                currency=self.settings.currency,
            ),
        )
