"""Factory functions for the resilience components"""

import random

from medsim.config import Settings, settings as default_settings
from medsim.core.resilience.backoff import BackoffCalculator
from medsim.core.resilience.clock import Clock
from medsim.core.resilience.rate_limiter import TokenBucket
from medsim.core.resilience.retry import RetryOrchestrator


def build_rate_limiter(config: Settings | None = None, clock: Clock | None = None) -> TokenBucket:
    """Create the bucket guarding calls to the model provider"""
    config = config or default_settings
    return TokenBucket(config.RATE_LIMIT_CAPACITY, config.refill_rate, clock=clock)


def build_backoff(config: Settings | None = None, rng: random.Random | None = None) -> BackoffCalculator:
    config = config or default_settings
    return BackoffCalculator(
        base_delay_ms=config.RETRY_BASE_DELAY_MS,
        backoff_factor=config.RETRY_BACKOFF_FACTOR,
        max_delay_ms=config.RETRY_MAX_DELAY_MS,
        rng=rng,
    )


def build_orchestrator(
    rate_limiter: TokenBucket,
    config: Settings | None = None,
) -> RetryOrchestrator:
    """Create a retry orchestrator sharing ``rate_limiter``"""
    config = config or default_settings
    return RetryOrchestrator(
        rate_limiter=rate_limiter,
        backoff=build_backoff(config),
        default_max_retries=config.DEFAULT_MAX_RETRIES,
    )
