"""
Common Value Objects

Value objects used across multiple domains:
- Money: Represents monetary amounts with currency, fixed at 2 decimal places
- TimeRange: Represents a half-open [start, end) interval of instants
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP

from shared.domain.base import ValueObject

CENTS = Decimal('0.01')
DEFAULT_CURRENCY = 'IRR'
SUPPORTED_CURRENCIES = ('IRR', 'USD', 'EUR')


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """
    Check whether [a_start, a_end) and [b_start, b_end) intersect

    Intervals are half-open, so a range ending exactly when another
    starts does not overlap it.
    """
    return a_start < b_end and b_start < a_end


def billed_units(start: datetime, end: datetime, unit_minutes: int = 60) -> int:
    """
    Number of billing units covering [start, end)

    The duration is taken in whole minutes and any positive remainder
    rounds up to a full unit. Never less than one.

    Examples (unit = 60):
        10 min -> 1, 59 min -> 1, 60 min -> 1, 61 min -> 2, 121 min -> 3
    """
    if unit_minutes <= 0:
        raise ValueError("unit_minutes must be positive")
    minutes = int((end - start).total_seconds() // 60)
    units = (minutes + unit_minutes - 1) // unit_minutes
    return max(units, 1)


@dataclass(frozen=True)
class Money(ValueObject):
    """
    Money value object

    Represents a monetary amount with currency.
    The amount is always stored at 2 decimal places, rounded half-up.
    """
    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self):
        amount = Decimal(str(self.amount)).quantize(CENTS, rounding=ROUND_HALF_UP)
        if amount < 0:
            raise ValueError("Amount cannot be negative")
        if not self.currency:
            raise ValueError("Currency is required")
        if self.currency not in SUPPORTED_CURRENCIES:
            raise ValueError(f"Unsupported currency: {self.currency}")
        object.__setattr__(self, 'amount', amount)

    def __add__(self, other: 'Money') -> 'Money':
        """Add two money objects"""
        if not isinstance(other, Money):
            raise TypeError("Can only add Money to Money")
        if self.currency != other.currency:
            raise ValueError(f"Cannot add different currencies: {self.currency} and {other.currency}")
        return Money(self.amount + other.amount, self.currency)

    def __mul__(self, factor: int | Decimal) -> 'Money':
        """Multiply money by a whole or decimal factor"""
        if isinstance(factor, bool) or not isinstance(factor, (int, Decimal)):
            raise TypeError("Can only multiply Money by int or Decimal")
        return Money(self.amount * Decimal(factor), self.currency)

    def to_whole_units(self) -> int:
        """Amount rounded half-up to whole currency units"""
        return int(self.amount.quantize(Decimal('1'), rounding=ROUND_HALF_UP))

    def __str__(self):
        return f"{self.amount:,.2f} {self.currency}"

    def __repr__(self):
        return f"Money({self.amount}, '{self.currency}')"


@dataclass(frozen=True)
class TimeRange(ValueObject):
    """
    Time range value object

    Represents a range from start (inclusive) to end (exclusive).
    Used for reservation windows and conflict checks.
    """
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start ({self.start}) must be before end ({self.end})")

    def overlaps_with(self, other: 'TimeRange') -> bool:
        """
        Check if this range overlaps with another

        Examples:
            - 10:00-12:00 overlaps with 11:00-13:00 -> True
            - 10:00-12:00 overlaps with 12:00-13:00 -> False (adjacent)
        """
        if not isinstance(other, TimeRange):
            raise TypeError("Can only check overlap with another TimeRange")
        return overlaps(self.start, self.end, other.start, other.end)

    def contains(self, instant: datetime) -> bool:
        """start is inclusive, end is exclusive"""
        return self.start <= instant < self.end

    def billed_units(self, unit_minutes: int = 60) -> int:
        return billed_units(self.start, self.end, unit_minutes)

    @property
    def minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)

    def __str__(self):
        return f"{self.start.isoformat()} - {self.end.isoformat()}"

    def __repr__(self):
        return f"TimeRange({self.start!r}, {self.end!r})"
