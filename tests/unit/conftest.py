"""
Unit test configuration.

Time never really passes in unit tests: the token bucket reads a fake clock
and the orchestrator's sleeps are recorded instead of awaited.
"""

import json
from unittest.mock import MagicMock

import pytest

from medsim.core.resilience.backoff import BackoffCalculator
from medsim.core.resilience.rate_limiter import TokenBucket
from medsim.core.resilience.retry import RetryOrchestrator


class FakeClock:
    """Manually advanced millisecond clock"""

    def __init__(self, start: float = 1_000_000.0):
        self.current = start

    def now(self) -> float:
        return self.current

    def advance(self, ms: float) -> None:
        self.current += ms


class RecordingSleep:
    """Async sleep stand-in that records requested durations (seconds)"""

    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class RecordingSink:
    """Collects emitted log records"""

    def __init__(self):
        self.records: list[tuple[str, str]] = []

    def emit(self, level, record) -> None:
        self.records.append((level, record))

    @property
    def entries(self) -> list[dict]:
        return [json.loads(record) for _, record in self.records]


def fixed_rng(value: float = 0.5) -> MagicMock:
    """RNG whose random() always returns ``value``"""
    rng = MagicMock()
    rng.random.return_value = value
    return rng


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def recording_sink():
    return RecordingSink()


@pytest.fixture
def rate_limiter(fake_clock):
    """Roomy bucket on the fake clock so admission never waits by default"""
    return TokenBucket(capacity=100, refill_rate=10, clock=fake_clock)


@pytest.fixture
def orchestrator(rate_limiter, recording_sleep):
    """Orchestrator with half-of-ceiling jitter and recorded sleeps"""
    return RetryOrchestrator(
        rate_limiter=rate_limiter,
        backoff=BackoffCalculator(rng=fixed_rng(0.5)),
        sleep=recording_sleep,
    )


@pytest.fixture
def make_rng():
    """Factory for RNGs with a fixed random() value"""
    return fixed_rng
