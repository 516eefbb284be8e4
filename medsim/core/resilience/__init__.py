"""Resilience layer for model provider calls: rate limiting, retries, error reporting"""

from medsim.core.resilience.backoff import BackoffCalculator, compute_delay, exponential_backoff
from medsim.core.resilience.classifier import is_retryable, is_retryable_status
from medsim.core.resilience.clock import Clock, MonotonicClock
from medsim.core.resilience.errors import (
    InvalidAttemptError,
    InvalidConfigurationError,
    ProviderError,
    ResilienceError,
    RetryDeadlineExceeded,
)
from medsim.core.resilience.factory import build_orchestrator, build_rate_limiter
from medsim.core.resilience.rate_limiter import TokenBucket
from medsim.core.resilience.redaction import sanitize
from medsim.core.resilience.reporting import ErrorEnvelope, handle_api_error, log_without_phi
from medsim.core.resilience.retry import RetryOrchestrator

__all__ = [
    "BackoffCalculator",
    "Clock",
    "ErrorEnvelope",
    "InvalidAttemptError",
    "InvalidConfigurationError",
    "MonotonicClock",
    "ProviderError",
    "ResilienceError",
    "RetryDeadlineExceeded",
    "RetryOrchestrator",
    "TokenBucket",
    "build_orchestrator",
    "build_rate_limiter",
    "compute_delay",
    "exponential_backoff",
    "handle_api_error",
    "is_retryable",
    "is_retryable_status",
    "log_without_phi",
    "sanitize",
]
