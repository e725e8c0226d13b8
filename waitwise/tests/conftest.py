from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from waitwise.analytics.store import clear_events

# A Saturday, 19:00 UTC
BASE_TIME = datetime(2024, 6, 15, 19, 0, tzinfo=timezone.utc)


class FakeClock:
    """Settable clock for the aggregator."""

    def __init__(self, start: datetime = BASE_TIME) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(autouse=True)
def _reset_events():
    clear_events()
    yield
    clear_events()
