"""
clock.py - Time sources for the rent ledger

The ledger never calls datetime.now() directly; it asks an injected Clock.

Classes:
- Clock: Protocol defining the time interface
- SystemClock: Wall-clock time, timezone-aware UTC
- ManualClock: Caller-controlled time for tests and simulations
"""

from datetime import datetime, timezone
from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """
    Protocol for time sources.

    now() is expected to be monotonically non-decreasing. The ledger trusts
    whatever it returns and records it as-is.
    """

    def now(self) -> datetime:
        """Return the current time."""
        ...


class SystemClock:
    """Clock backed by the system wall clock (UTC)."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def __repr__(self):
        return "SystemClock()"


class ManualClock:
    """
    Clock whose time only moves when told to.

    Time can only move forward, never backward.

    Example:
        clock = ManualClock(datetime(2024, 3, 1))
        ledger = RentLedger("admin", clock=clock)
        clock.advance_time(datetime(2024, 3, 5))
    """

    def __init__(self, initial_time: Optional[datetime] = None):
        self._current_time = initial_time or datetime(1970, 1, 1, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._current_time

    def advance_time(self, new_time: datetime) -> None:
        """
        Move the clock to new_time.

        Raises:
            ValueError: If new_time is before the current time
        """
        if new_time < self._current_time:
            raise ValueError(
                f"Cannot move time backwards: {new_time} < {self._current_time}"
            )
        self._current_time = new_time

    def __repr__(self):
        return f"ManualClock({self._current_time.isoformat()})"
