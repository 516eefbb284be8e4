"""
Error reporting for the API boundary.

``handle_api_error`` turns any caught failure into:
- one PHI-free JSON log record, tagged with a fresh correlation ID
- one stable ``ErrorEnvelope`` for the caller, carrying the same correlation ID

Callers only ever see a fixed, non-technical message. Stack traces and error
context go to the audit log, after redaction.
"""

import json
import logging
import sys
import traceback
import uuid
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any, Literal, Protocol, TextIO

from pydantic import BaseModel, ConfigDict, Field

from medsim.core.resilience.classifier import (
    get_error_name,
    get_status_code,
    is_retryable_status,
)
from medsim.core.resilience.redaction import sanitize

logger = logging.getLogger(__name__)

AUDIT_LOGGER_NAME = "medsim.audit"

LogLevel = Literal["error", "warn", "info", "debug"]

_LOGGING_LEVELS: dict[str, int] = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

RATE_LIMIT_MESSAGE = "Request limit reached. Please wait a moment and try again."
SERVICE_UNAVAILABLE_MESSAGE = (
    "The AI service is temporarily unavailable. Please wait a moment and try again."
)
DEFAULT_MESSAGE = "An unexpected error occurred. Please contact support."

ERROR_MESSAGES: dict[int, str] = {
    429: RATE_LIMIT_MESSAGE,
    500: SERVICE_UNAVAILABLE_MESSAGE,
    503: SERVICE_UNAVAILABLE_MESSAGE,
    401: "There is a problem with access authentication. Please contact an administrator.",
    404: "The requested resource could not be found.",
    400: "The request was invalid. Please check your input.",
    502: "A gateway error occurred. Please wait a moment and try again.",
    504: "The request timed out. Please wait a moment and try again.",
}


class ErrorEnvelope(BaseModel):
    """Failure response returned across the API boundary"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    success: Literal[False] = False
    error: str
    correlation_id: str = Field(alias="correlationId")
    retryable: bool


class Sink(Protocol):
    """Append-only destination for serialized log records"""

    def emit(self, level: LogLevel, record: str) -> None: ...


class LoggingSink:
    """Writes records through the audit logger at the record's level"""

    def __init__(self, logger_name: str = AUDIT_LOGGER_NAME):
        self._logger = logging.getLogger(logger_name)

    def emit(self, level: LogLevel, record: str) -> None:
        self._logger.log(_LOGGING_LEVELS.get(level, logging.INFO), record)


class StreamSink:
    """Writes one record per line to a text stream"""

    def __init__(self, stream: TextIO | None = None):
        self._stream = stream or sys.stdout

    def emit(self, level: LogLevel, record: str) -> None:
        self._stream.write(record + "\n")
        self._stream.flush()


_default_sink: Sink = LoggingSink()


def generate_correlation_id() -> str:
    """New UUID v4 string"""
    return str(uuid.uuid4())


def get_user_friendly_message(status_code: int | None = None) -> str:
    """User-facing message for a status code, generic when unmapped"""
    if not status_code:
        return DEFAULT_MESSAGE
    return ERROR_MESSAGES.get(status_code, DEFAULT_MESSAGE)


def _iso_timestamp() -> str:
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def log_without_phi(
    level: LogLevel,
    data: Any,
    correlation_id: str,
    sink: Sink | None = None,
) -> None:
    """
    Emit one structured log record with PHI fields removed from ``data``.

    Args:
        level: Record level (error, warn, info, debug)
        data: Record payload; mappings have PHI keys stripped
        correlation_id: ID linking this record to a caller-visible response
        sink: Destination (defaults to the audit logger)
    """
    entry = {
        "level": level,
        "timestamp": _iso_timestamp(),
        "correlationId": correlation_id,
        "data": sanitize(data),
    }
    (sink or _default_sink).emit(level, json.dumps(entry, default=str, ensure_ascii=False))


def _format_stack(error: BaseException) -> str:
    return "".join(traceback.format_exception(error)).rstrip()


def build_error_record(error: BaseException, status_code: int | None = None) -> dict[str, Any]:
    """Log payload for ``error``, before redaction.

    Only a fixed set of attributes is read from the error; ``context`` entries
    are merged in but never replace the fixed fields.
    """
    record: dict[str, Any] = {
        "message": str(error),
        "statusCode": status_code,
        "stack": _format_stack(error),
        "name": get_error_name(error),
    }

    status = get_status_code(error)
    if status is not None:
        record["status"] = status

    code = getattr(error, "code", None)
    if isinstance(code, str):
        record["code"] = code

    context = getattr(error, "context", None)
    if isinstance(context, Mapping):
        for key, value in context.items():
            record.setdefault(key, value)

    return record


def handle_api_error(
    error: BaseException,
    status_code: int | None = None,
    sink: Sink | None = None,
) -> ErrorEnvelope:
    """
    Report a failure and build the caller-facing envelope.

    Every call is a separate reporting event with its own correlation ID, so it
    is safe to call at each layer that catches the error.

    Args:
        error: The caught failure
        status_code: HTTP status the boundary will answer with, if known
        sink: Log destination (defaults to the audit logger)

    Returns:
        ErrorEnvelope; this function never raises
    """
    correlation_id = generate_correlation_id()

    try:
        user_message = get_user_friendly_message(status_code)
        retryable = is_retryable_status(status_code)

        log_without_phi("error", build_error_record(error, status_code), correlation_id, sink)

        return ErrorEnvelope(
            error=user_message,
            correlation_id=correlation_id,
            retryable=retryable,
        )
    except Exception as e:  # pylint: disable=broad-exception-caught
        # type name only, never the error text or traceback
        logger.error(
            "Failed to report API error (correlation_id=%s): %s",
            correlation_id,
            type(e).__name__,
        )
        return ErrorEnvelope(
            error=DEFAULT_MESSAGE,
            correlation_id=correlation_id,
            retryable=False,
        )
