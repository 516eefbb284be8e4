"""
Retry orchestration for outbound provider calls.

Each attempt first takes a token from the shared rate limiter (waiting if the
bucket is empty), then runs the operation. Failures are classified: retryable
ones are retried after a full-jitter backoff, anything else, and the last
attempt's failure, is re-raised as-is so callers can still match on its
status and code.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from medsim.core.resilience.backoff import BackoffCalculator, exponential_backoff
from medsim.core.resilience.classifier import is_retryable
from medsim.core.resilience.errors import InvalidAttemptError, RetryDeadlineExceeded
from medsim.core.resilience.rate_limiter import TokenBucket

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_RETRIES = 3

Sleep = Callable[[float], Awaitable[None]]


@dataclass
class RetryState:
    """Bookkeeping for a single orchestrated call"""

    attempt: int = 0
    last_error: Exception | None = None


class RetryOrchestrator:
    """Runs operations under admission control and classified retries.

    The rate limiter is the only state shared between calls; everything else
    lives in a per-call ``RetryState``.
    """

    def __init__(
        self,
        rate_limiter: TokenBucket,
        backoff: BackoffCalculator | None = None,
        sleep: Sleep = asyncio.sleep,
        default_max_retries: int = DEFAULT_MAX_RETRIES,
    ):
        """
        Args:
            rate_limiter: Shared token bucket consulted before every attempt
            backoff: Delay calculator (defaults to the reference constants)
            sleep: Coroutine used to suspend, takes seconds
            default_max_retries: Attempts used when a call does not specify one
        """
        if default_max_retries < 1:
            raise InvalidAttemptError("default_max_retries must be at least 1")

        self.rate_limiter = rate_limiter
        self.backoff = backoff or BackoffCalculator()
        self.default_max_retries = default_max_retries
        self._sleep = sleep

    async def call_with_retry(
        self,
        operation: Callable[[], Awaitable[T]],
        max_retries: int | None = None,
        label: str = "unknown",
        *,
        deadline: float | None = None,
    ) -> T:
        """
        Run ``operation`` with up to ``max_retries`` attempts.

        Args:
            operation: No-argument callable returning an awaitable result
            max_retries: Total attempts, including the first one
            label: Name used in log lines
            deadline: Optional total budget in seconds for the whole sequence,
                including limiter waits and backoff. None means no bound.

        Returns:
            The operation's result, unchanged

        Raises:
            The operation's last error, unwrapped, once attempts are exhausted or
            as soon as a non-retryable error is seen.
            InvalidAttemptError: If max_retries is less than 1
            RetryDeadlineExceeded: If ``deadline`` passes before the sequence ends
        """
        attempts = self.default_max_retries if max_retries is None else max_retries
        if attempts < 1:
            raise InvalidAttemptError("max_retries must be at least 1")

        state = RetryState()

        if deadline is None:
            return await self._run(operation, attempts, label, state)

        timeout = asyncio.timeout(deadline)
        try:
            async with timeout:
                return await self._run(operation, attempts, label, state)
        except TimeoutError:
            if not timeout.expired():
                raise
            logger.error(
                "%s: Retry deadline of %ss exceeded after %d attempt(s)",
                label,
                deadline,
                state.attempt,
            )
            raise RetryDeadlineExceeded(label, deadline, state.last_error) from state.last_error

    async def _run(
        self,
        operation: Callable[[], Awaitable[T]],
        max_retries: int,
        label: str,
        state: RetryState,
    ) -> T:
        for attempt in range(1, max_retries + 1):
            state.attempt = attempt

            wait_ms = self.rate_limiter.take_token()
            if wait_ms > 0:
                logger.debug("%s: Rate limited, waiting %dms before attempt %d", label, wait_ms, attempt)
                await self._sleep(wait_ms / 1000)

            try:
                return await operation()
            except Exception as e:  # pylint: disable=broad-exception-caught
                state.last_error = e

                if attempt == max_retries:
                    logger.error(
                        "%s: All %d attempts failed. Last error: %s",
                        label,
                        max_retries,
                        e,
                    )
                    raise

                if not is_retryable(e):
                    logger.error("%s: Non-retryable error encountered: %s", label, e)
                    raise

                logger.warning(
                    "%s: Attempt %d failed, preparing to retry. Error: %s",
                    label,
                    attempt,
                    e,
                )

            await exponential_backoff(attempt, self.backoff, self._sleep)

        # unreachable: the last attempt either returns or raises
        raise AssertionError("retry loop exited without a result")
