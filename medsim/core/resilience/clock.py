"""Clock sources for time-based resilience state"""

import time
from typing import Protocol


class Clock(Protocol):
    """Anything that can report the current time in milliseconds"""

    def now(self) -> float:
        """Current time in milliseconds, monotonically non-decreasing"""
        ...


class MonotonicClock:
    """Production clock backed by ``time.monotonic``"""

    def now(self) -> float:
        return time.monotonic() * 1000
