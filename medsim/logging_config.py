"""
Logging Configuration for MedSim Guard

This module sets up centralized logging configuration for the entire application.
It should be imported and initialized early in the application lifecycle, before
any other modules that create loggers.

Two streams are configured:
- application logs on the root logger (human readable)
- audit records on the ``medsim.audit`` logger, written verbatim so that each
  pre-serialized, PHI-free JSON record stays on exactly one line
"""

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Literal

from medsim.config import settings
from medsim.core.resilience.reporting import AUDIT_LOGGER_NAME

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class JSONFormatter(logging.Formatter):
    """Formats application records as single-line JSON"""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def setup_logging(log_level: str | None = None, log_format: str | None = None) -> None:
    """
    Configure logging for the entire application.

    Args:
        log_level: Optional override for log level. If not provided, uses settings.LOG_LEVEL
        log_format: Optional override for the application log format ("text" or "json")

    """
    level = log_level or settings.LOG_LEVEL
    level_upper = level.upper()
    numeric_level = getattr(logging, level_upper, logging.INFO)
    fmt = log_format or settings.LOG_FORMAT

    root_logger = logging.getLogger()

    # Clear any existing handlers to avoid duplicates
    # This is important if setup_logging() is called multiple times
    root_logger.handlers.clear()
    root_logger.setLevel(numeric_level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)

    if fmt == "json":
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    _configure_audit_logger()

    root_logger.info(
        "Logging configured: level=%s, format=%s, handler=console",
        level_upper,
        fmt,
    )

    # Configure third-party library logging levels
    # Many libraries are too verbose at DEBUG level
    _configure_third_party_loggers(numeric_level)


def _configure_audit_logger() -> None:
    """
    Route audit records to their own handler.

    Records arrive already serialized and redacted, so the formatter adds
    nothing and the logger does not propagate to the root handler.
    """
    audit_logger = logging.getLogger(AUDIT_LOGGER_NAME)
    audit_logger.handlers.clear()
    audit_logger.setLevel(logging.DEBUG)
    audit_logger.propagate = False

    audit_handler = logging.StreamHandler(sys.stdout)
    audit_handler.setFormatter(logging.Formatter("%(message)s"))
    audit_logger.addHandler(audit_handler)


def _configure_third_party_loggers(app_level: int) -> None:
    """
    Configure logging levels for third-party libraries.

    Args:
        app_level: The application's log level (used as reference)

    """

    # Uvicorn logging (web server)
    # Keep at INFO even if app is at DEBUG to avoid request spam
    logging.getLogger("uvicorn").setLevel(max(app_level, logging.INFO))
    logging.getLogger("uvicorn.access").setLevel(logging.INFO)
    logging.getLogger("uvicorn.error").setLevel(logging.WARNING)

    # FastAPI/Starlette logging
    logging.getLogger("fastapi").setLevel(logging.INFO)
    logging.getLogger("starlette").setLevel(logging.WARNING)

    # HTTP client libraries used by the provider SDK
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def update_log_level(log_level: str) -> None:
    """
    Dynamically update the logging level at runtime.

    This is useful for debugging - we can temporarily increase verbosity
    without restarting the application.

    Args:
        log_level: New log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    level_upper = log_level.upper()
    numeric_level = getattr(logging, level_upper, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Update all handlers
    for handler in root_logger.handlers:
        handler.setLevel(numeric_level)

    root_logger.info("Log level updated to: %s", level_upper)
