"""
Booking pricing

Pure functions: the total of a booking must be reproducible from the
room rate and the time range alone, e.g. when a payment is disputed.
"""

from datetime import datetime
from decimal import Decimal

from shared.domain.value_objects import DEFAULT_CURRENCY, Money, TimeRange, billed_units


def price(hourly_rate: int, start: datetime, end: datetime, unit_minutes: int = 60) -> Decimal:
    """
    hourly_rate x billed units, at 2 decimal places rounded half-up

    >>> price(100000, datetime(2025, 1, 1, 10), datetime(2025, 1, 1, 11, 30))
    Decimal('200000.00')
    """
    return quote(hourly_rate, TimeRange(start, end), unit_minutes=unit_minutes).amount


def quote(
    hourly_rate: int,
    time_range: TimeRange,
    currency: str = DEFAULT_CURRENCY,
    unit_minutes: int = 60,
) -> Money:
    if hourly_rate < 0:
        raise ValueError("Hourly rate cannot be negative")
    units = billed_units(time_range.start, time_range.end, unit_minutes)
    return Money(Decimal(hourly_rate), currency) * units


def to_gateway_amount(total: Decimal) -> int:
    """Total in whole currency units, rounded half-up, for gateways that take integers"""
    return Money(total).to_whole_units()
