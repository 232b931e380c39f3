# tests/managers/conftest.py
"""Fake clocks for the in-memory managers."""

from datetime import UTC, datetime, timedelta

import pytest


class EpochClock:
    """Stands in for ``time.time``."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class DatetimeClock:
    """Stands in for ``utc_now``."""

    def __init__(self) -> None:
        self.now = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now += timedelta(**delta)


@pytest.fixture
def epoch_clock() -> EpochClock:
    return EpochClock()


@pytest.fixture
def datetime_clock() -> DatetimeClock:
    return DatetimeClock()
