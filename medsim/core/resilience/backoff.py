"""
Full-jitter exponential backoff.

The ceiling for attempt ``n`` is ``min(MAX_DELAY_MS, BASE_DELAY_MS * BACKOFF_FACTOR ** (n - 1))``
and the actual delay is drawn uniformly from ``[0, ceiling]``.
"""

import asyncio
import logging
import random
from typing import Awaitable, Callable

from medsim.core.resilience.errors import InvalidAttemptError, InvalidConfigurationError

logger = logging.getLogger(__name__)

BASE_DELAY_MS = 1000
BACKOFF_FACTOR = 2
MAX_DELAY_MS = 60000


class BackoffCalculator:
    """Computes randomized retry delays in milliseconds"""

    def __init__(
        self,
        base_delay_ms: float = BASE_DELAY_MS,
        backoff_factor: float = BACKOFF_FACTOR,
        max_delay_ms: float = MAX_DELAY_MS,
        rng: random.Random | None = None,
    ):
        if base_delay_ms <= 0 or max_delay_ms <= 0:
            raise InvalidConfigurationError("Backoff delays must be positive numbers")
        if backoff_factor < 1:
            raise InvalidConfigurationError("backoff_factor must be >= 1")

        self.base_delay_ms = base_delay_ms
        self.backoff_factor = backoff_factor
        self.max_delay_ms = max_delay_ms
        self._rng = rng or random.Random()

    def max_delay(self, attempt: int) -> float:
        """Upper bound of the delay for ``attempt``"""
        if attempt <= 0:
            raise InvalidAttemptError("Attempt number must be positive")

        if self.backoff_factor == 1:
            return min(self.max_delay_ms, self.base_delay_ms)

        # grow one step at a time and stop at the cap, never computing factor**n
        delay = self.base_delay_ms
        for _ in range(attempt - 1):
            if delay >= self.max_delay_ms:
                break
            delay *= self.backoff_factor
        return min(self.max_delay_ms, delay)

    def compute_delay(self, attempt: int) -> float:
        """
        Sample a delay for the given 1-based attempt.

        Args:
            attempt: Attempt number that just failed (>= 1)

        Returns:
            Delay in milliseconds within ``[0, max_delay(attempt)]``

        Raises:
            InvalidAttemptError: If attempt is not positive
        """
        return self._rng.random() * self.max_delay(attempt)


_default_calculator = BackoffCalculator()


def compute_delay(attempt: int) -> float:
    """Full-jitter delay for ``attempt`` using the reference constants"""
    return _default_calculator.compute_delay(attempt)


async def exponential_backoff(
    attempt: int,
    calculator: BackoffCalculator | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> float:
    """Wait out the backoff delay for ``attempt`` and return it in milliseconds"""
    delay_ms = (calculator or _default_calculator).compute_delay(attempt)

    logger.info("Retrying attempt %d, waiting %dms", attempt, round(delay_ms))

    await sleep(delay_ms / 1000)
    return delay_ms
