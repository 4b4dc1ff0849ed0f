import pytest
from datetime import datetime, timedelta, timezone

from hotspot_login.time_service import TimeService


class FakeTimeService(TimeService):
    """TimeService with a hand-driven clock."""

    def __init__(self, start: datetime):
        super().__init__("UTC")
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


@pytest.fixture
def clock():
    return FakeTimeService(datetime(2025, 9, 5, 2, 33, 15, tzinfo=timezone.utc))
