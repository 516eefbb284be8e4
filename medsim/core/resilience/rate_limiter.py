"""Token bucket rate limiter for outbound provider calls.

One bucket guards one shared resource (e.g. "calls to the model provider").
Tokens refill continuously at ``refill_rate`` per second and are capped at
``capacity``, so an idle period never banks more than one full burst.
"""

import logging
import math
import threading

from medsim.core.resilience.clock import Clock, MonotonicClock
from medsim.core.resilience.errors import InvalidConfigurationError

logger = logging.getLogger(__name__)


class TokenBucket:
    """Continuously refilling token bucket"""

    def __init__(self, capacity: float, refill_rate: float, clock: Clock | None = None):
        """
        Args:
            capacity: Maximum burst size, must be positive
            refill_rate: Tokens added per second, must be positive
            clock: Time source in milliseconds (defaults to a monotonic clock)

        Raises:
            InvalidConfigurationError: If capacity or refill_rate is not positive
        """
        if capacity <= 0 or refill_rate <= 0:
            raise InvalidConfigurationError(
                "Capacity and refill_rate must be positive numbers"
            )

        self.capacity = capacity
        self.refill_rate = refill_rate
        self._clock = clock or MonotonicClock()
        self._tokens = float(capacity)
        self._last_refill_time = self._clock.now()
        # refill and decrement must not interleave across threads
        self._lock = threading.Lock()

        logger.debug(
            "TokenBucket created: capacity=%s, refill_rate=%.4f/s",
            capacity,
            refill_rate,
        )

    def take_token(self) -> int:
        """Try to take one token.

        Returns:
            0 if a token was taken and the caller may proceed now, otherwise the
            number of milliseconds until one more token will exist. Nothing is
            consumed in the latter case.
        """
        with self._lock:
            self._refill()

            if self._tokens >= 1:
                self._tokens -= 1
                return 0

            return math.ceil((1 / self.refill_rate) * 1000)

    @property
    def available_tokens(self) -> float:
        """Current (refilled) token count"""
        with self._lock:
            self._refill()
            return self._tokens

    def _refill(self) -> None:
        now = self._clock.now()
        elapsed_ms = now - self._last_refill_time

        if elapsed_ms > 0:
            tokens_to_add = (elapsed_ms / 1000) * self.refill_rate
            self._tokens = min(self.capacity, self._tokens + tokens_to_add)
            self._last_refill_time = now

    def __repr__(self) -> str:
        return (
            f"TokenBucket(capacity={self.capacity}, "
            f"refill_rate={self.refill_rate}, tokens={self._tokens:.2f})"
        )
