"""
Failure classification for retry decisions.

Precedence matters: explicit status codes are checked before network codes and
timeout heuristics, so a 4xx is never retried because its message happens to
mention "timeout".
"""

import errno
import socket

RATE_LIMIT_STATUS = 429

# statuses a caller can sensibly retry
RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({429, 500, 502, 503, 504})

# transient network failures, by errno-style name
RETRYABLE_NETWORK_CODES: frozenset[str] = frozenset(
    {
        "ECONNRESET",
        "ENOTFOUND",
        "ETIMEDOUT",
        "ECONNREFUSED",
        "ENETUNREACH",
    }
)


def get_status_code(error: BaseException) -> int | None:
    """Numeric status attached to ``error`` (``status`` or ``status_code``)"""
    for attr in ("status", "status_code"):
        value = getattr(error, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


def get_error_code(error: BaseException) -> str | None:
    """String code attached to ``error``.

    Falls back to the errno name for OS-level errors, and to ``ENOTFOUND`` for
    DNS resolution failures.
    """
    code = getattr(error, "code", None)
    if isinstance(code, str):
        return code

    if isinstance(error, socket.gaierror):
        return "ENOTFOUND"
    if isinstance(error, OSError) and isinstance(error.errno, int):
        return errno.errorcode.get(error.errno)
    return None


def get_error_name(error: BaseException) -> str:
    name = getattr(error, "name", None)
    if isinstance(name, str) and name:
        return name
    return type(error).__name__


def is_timeout(error: BaseException) -> bool:
    """Whether the error is a timeout by kind or by message"""
    if isinstance(error, TimeoutError):
        return True
    if "Timeout" in get_error_name(error):
        return True
    return "timeout" in str(error).lower()


def is_retryable(error: BaseException) -> bool:
    """
    Decide whether a failed call is worth another attempt.

    Order:
    1. 429 -> retry
    2. 5xx -> retry
    3. other 4xx -> do not retry
    4. known transient network code -> retry
    5. timeout -> retry
    6. anything else -> retry
    """
    status = get_status_code(error)

    if status == RATE_LIMIT_STATUS:
        return True
    if status is not None and 500 <= status < 600:
        return True
    if status is not None and 400 <= status < 500:
        return False

    if get_error_code(error) in RETRYABLE_NETWORK_CODES:
        return True

    if is_timeout(error):
        return True

    # unknown failures are assumed to be transient
    return True


def is_retryable_status(status_code: int | None) -> bool:
    """Whether a response status is one the caller could retry"""
    return status_code in RETRYABLE_STATUS_CODES
