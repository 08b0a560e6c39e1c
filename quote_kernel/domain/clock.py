"""
Clock -- Injectable time source.

Responsibility:
    The quotation assembler stamps every quotation with ``computed_at`` and
    derives its validity window from it.  That timestamp is the only
    time-dependent value in a quotation, so it is read from an injected
    Clock rather than from ``datetime.now()``; replaying a computation with
    the same clock value reproduces the quotation exactly.

Architecture position:
    Kernel > Domain -- pure functional core.  SystemClock is the one
    sanctioned read of wall-clock time.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone


class Clock(ABC):
    """
    Abstract clock interface.

    Guarantees:
        ``now()`` returns a timezone-aware UTC ``datetime``.
    """

    @abstractmethod
    def now(self) -> datetime:
        """Get the current UTC time."""
        ...


class SystemClock(Clock):
    """Production clock backed by the system time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """
    Clock pinned to a chosen instant, for tests and replays.

    ``now()`` returns the same value on every call until ``advance()`` or
    ``set_time()`` moves it.
    """

    DEFAULT_TIME = datetime(2025, 1, 1, 9, 0, 0, tzinfo=timezone.utc)

    def __init__(self, fixed_time: datetime | None = None):
        fixed_time = fixed_time or self.DEFAULT_TIME
        if fixed_time.tzinfo is None:
            raise ValueError("FixedClock requires a timezone-aware datetime")
        self._time = fixed_time.astimezone(timezone.utc)

    def now(self) -> datetime:
        return self._time

    def set_time(self, time: datetime) -> None:
        if time.tzinfo is None:
            raise ValueError("FixedClock requires a timezone-aware datetime")
        self._time = time.astimezone(timezone.utc)

    def advance(self, **delta: float) -> datetime:
        """Move the clock forward, e.g. ``advance(days=31)``."""
        self._time = self._time + timedelta(**delta)
        return self._time
