"""
Injectable clocks.

Authorization decisions are evaluated against a single "now" taken from a
Clock. Production code uses SystemClock; tests pin time with FixedClock.
"""

from datetime import datetime, timedelta
from typing import Protocol

from academia_authz.shared.utils.datetime import ensure_utc, utc_now


class Clock(Protocol):
    """Source of the current instant (aware UTC)."""

    def now(self) -> datetime: ...


class SystemClock:
    """Clock backed by the wall clock."""

    def now(self) -> datetime:
        return utc_now()


class FixedClock:
    """Clock frozen at a given instant; advance() moves it forward."""

    def __init__(self, instant: datetime):
        self._instant = ensure_utc(instant)

    def now(self) -> datetime:
        return self._instant

    def set(self, instant: datetime) -> None:
        self._instant = ensure_utc(instant)

    def advance(self, delta: timedelta) -> None:
        self._instant = self._instant + delta
