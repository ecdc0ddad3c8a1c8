"""Stay pricing: base rate times nights times rooms, plus a flat tax"""
import math
from datetime import datetime, time, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

from domain.value_objects import DateLike, Pricing

DEFAULT_TAX_RATE = Decimal("0.18")

_ONE_DAY = timedelta(days=1)
_WHOLE_UNIT = Decimal("1")


def _as_datetime(value: DateLike) -> datetime:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def calculate_nights(check_in: DateLike, check_out: DateLike) -> int:
    """Whole nights between two instants, partial days rounded up"""
    span = _as_datetime(check_out) - _as_datetime(check_in)
    return math.ceil(span / _ONE_DAY)


def round_half_up(amount: Decimal) -> Decimal:
    return amount.quantize(_WHOLE_UNIT, rounding=ROUND_HALF_UP)


def compute_price(
    nightly_rate: Union[Decimal, int, str],
    check_in: DateLike,
    check_out: DateLike,
    number_of_units: int,
    tax_rate: Union[Decimal, str] = DEFAULT_TAX_RATE,
    currency: str = "INR",
) -> Pricing:
    """Price a stay.

    ``nights = ceil(check_out - check_in)``, ``base = rate * nights * units``,
    ``tax = round_half_up(base * tax_rate)``, ``total = base + tax``.
    """
    nights = calculate_nights(check_in, check_out)
    if nights < 1:
        raise ValueError("Booking must be for at least 1 night")
    if number_of_units < 1:
        raise ValueError("At least 1 room is required")

    rate = Decimal(str(nightly_rate))
    tax_rate = Decimal(str(tax_rate))
    base_price = rate * nights * number_of_units
    tax_amount = round_half_up(base_price * tax_rate)

    return Pricing(
        nightly_rate=rate,
        nights=nights,
        number_of_units=number_of_units,
        base_price=base_price,
        tax_rate=tax_rate,
        tax_amount=tax_amount,
        total_price=base_price + tax_amount,
        currency=currency,
    )
