"""Exceptions raised by the resilience layer itself.

Provider failures are never wrapped in these; they propagate as raised.
"""

from typing import Any


class ResilienceError(Exception):
    """Base class for errors raised by the resilience layer"""


class InvalidConfigurationError(ResilienceError, ValueError):
    """Raised when a limiter or backoff setting is out of range"""


class InvalidAttemptError(ResilienceError, ValueError):
    """Raised for a non-positive attempt number or retry count"""


class RetryDeadlineExceeded(ResilienceError, TimeoutError):
    """Raised when a retry sequence runs past its caller-supplied deadline.

    The last operation error, if any, is chained as ``__cause__`` and kept on
    ``last_error``.
    """

    def __init__(self, label: str, deadline: float, last_error: BaseException | None = None):
        super().__init__(f"{label}: retry deadline of {deadline:g}s exceeded")
        self.label = label
        self.deadline = deadline
        self.last_error = last_error


class ProviderError(Exception):
    """Structured failure raised by operations talking to a model provider.

    Carries a fixed set of optional fields the classifier and reporter know how
    to read, plus a free-form ``context`` mapping. Context keys are merged into
    the error log record, so PHI keys placed there are redacted like any other.
    """

    def __init__(
        self,
        message: str,
        status: int | None = None,
        code: str | None = None,
        name: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code
        self.name = name or type(self).__name__
        self.context = dict(context or {})

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(message={self.message!r}, status={self.status!r}, "
            f"code={self.code!r})"
        )
