"""Shared fixtures for the complaintdesk test suite."""
import pytest

from complaintdesk.app.core.config import settings
from complaintdesk.app.rate_limit import RateLimiter, destroy_rate_limiter


class FakeClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, start_ms: float = 1_700_000_000_000.0):
        self.now_ms = start_ms

    def __call__(self) -> float:
        return self.now_ms

    def advance(self, ms: float) -> None:
        self.now_ms += ms


class FakeSleep:
    """Async sleep that advances a FakeClock instead of suspending."""

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        self.clock.advance(seconds * 1000.0)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_sleep(clock) -> FakeSleep:
    return FakeSleep(clock)


@pytest.fixture
def limiter(clock, fake_sleep):
    limiter = RateLimiter(auto_cleanup=False, clock=clock, sleep=fake_sleep)
    yield limiter
    limiter.destroy()


@pytest.fixture(autouse=True)
def _reset_default_limiter(monkeypatch):
    # Teardown runs after the test loop closes, so a default limiter must
    # not own a cleanup task it could no longer cancel.
    monkeypatch.setattr(settings, "rate_limit_auto_cleanup", False)
    destroy_rate_limiter()
    yield
    destroy_rate_limiter()
