"""Per-day occupancy tally.

A reservation over [check_in, check_out) holds ``number_of_units`` rooms on
every day from check_in up to, but not including, check_out. Tallying is a
plain sum so the order reservations arrive in does not matter.
"""
from collections import OrderedDict
from datetime import date
from typing import Dict, Iterable, Optional

from domain.entities import Reservation
from domain.value_objects import iter_days


def empty_window(start: date, end: date) -> "OrderedDict[date, int]":
    if end < start:
        raise ValueError("Window end must not be before window start")
    return OrderedDict((day, 0) for day in iter_days(start, end))


def tally_daily_occupancy(
    reservations: Iterable[Reservation],
    start: date,
    end: date,
) -> Dict[date, int]:
    """Units committed on each day of [start, end) by the active reservations given"""
    occupancy = empty_window(start, end)
    for reservation in reservations:
        if not reservation.is_active:
            continue
        overlap = reservation.date_range.clip(start, end)
        if overlap is None:
            continue
        for day in overlap.days():
            occupancy[day] += reservation.number_of_units
    return occupancy


def peak_occupancy(occupancy: Dict[date, int]) -> int:
    return max(occupancy.values(), default=0)


def earliest_conflict(reservations: Iterable[Reservation]) -> Optional[Reservation]:
    """The active reservation with the earliest check-in, for user-facing messages"""
    active = [r for r in reservations if r.is_active]
    if not active:
        return None
    return min(active, key=lambda r: (r.check_in, r.created_at))
