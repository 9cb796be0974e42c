"""
Injectable time source.

Everything in the reminder subsystem asks a clock for "now" instead of calling
``datetime.now`` directly, so date math can be pinned in tests.
"""

from datetime import datetime, timedelta, timezone


class SystemClock:
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """A clock pinned to one instant; ``advance`` moves it forward."""

    def __init__(self, instant: datetime):
        self._now = _as_utc(instant)

    def now(self) -> datetime:
        return self._now

    def advance(self, **delta) -> datetime:
        self._now = self._now + timedelta(**delta)
        return self._now

    def set(self, instant: datetime) -> None:
        self._now = _as_utc(instant)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
