"""
Clock

Injectable source of "now" so that admission rules and settlement
timestamps can be tested deterministically.
"""

from datetime import datetime, timedelta

from django.utils import timezone  # type: ignore


class Clock:
    """Returns the current instant as an aware datetime"""

    def now(self) -> datetime:
        raise NotImplementedError


class SystemClock(Clock):
    def now(self) -> datetime:
        return timezone.now()


class FixedClock(Clock):
    """Clock frozen at a given instant; advance() moves it forward"""

    def __init__(self, instant: datetime):
        self._instant = instant

    def now(self) -> datetime:
        return self._instant

    def advance(self, **kwargs) -> datetime:
        self._instant = self._instant + timedelta(**kwargs)
        return self._instant
