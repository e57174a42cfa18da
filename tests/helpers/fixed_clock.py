"""Controllable clock for deterministic timestamps in tests."""

from datetime import datetime, timedelta, timezone

DEFAULT_NOW = datetime(2025, 3, 14, 10, 15, 0, tzinfo=timezone.utc)


class FixedClock:
    """Callable clock: returns the frozen instant, moves only when told to."""

    def __init__(self, frozen_at: datetime = DEFAULT_NOW, step: timedelta | None = None):
        self._now = frozen_at
        self._step = step

    def __call__(self) -> datetime:
        now = self._now
        if self._step:
            self._now = self._now + self._step
        return now

    def advance(self, **kwargs) -> None:
        self._now = self._now + timedelta(**kwargs)

    def set(self, value: datetime) -> None:
        self._now = value
