"""
Error handling utilities and exception handlers for the MedSim API.

Every failure answered by the API goes through ``handle_api_error`` so the
caller gets the stable envelope and the audit log gets one redacted record.
"""

import logging

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from medsim.core.resilience.classifier import get_status_code
from medsim.core.resilience.errors import RetryDeadlineExceeded
from medsim.core.resilience.reporting import handle_api_error

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json; charset=utf-8"}


def resolve_status_code(error: BaseException) -> int:
    """Pick the HTTP status to answer with for a failure.

    Order: request validation, retry deadline, the status the provider
    reported, message hints for rate limits and credentials, then 500.
    """
    if isinstance(error, RequestValidationError):
        return 400
    if isinstance(error, RetryDeadlineExceeded):
        return 504

    status = get_status_code(error)
    if status is not None and 400 <= status < 600:
        return status

    message = str(error)
    if "Rate limit" in message or "quota" in message:
        return 429
    if "Unauthorized" in message or "API key" in message:
        return 401
    return 500


def error_response(error: BaseException, status_code: int | None = None) -> JSONResponse:
    """Report ``error`` and build the JSON envelope response"""
    status = status_code or resolve_status_code(error)
    envelope = handle_api_error(error, status)
    return JSONResponse(
        content=envelope.model_dump(by_alias=True),
        status_code=status,
        headers=JSON_HEADERS,
    )


async def fastapi_http_exception_handler(request: Request, exc: HTTPException):
    """Handle FastAPI HTTP exceptions"""
    # Convert FastAPI HTTPException to StarletteHTTPException and reuse handler
    starlette_exc = StarletteHTTPException(
        status_code=exc.status_code, detail=exc.detail
    )
    return await http_exception_handler(request, starlette_exc)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions with the error envelope"""
    logger.debug("HTTP %d on %s", exc.status_code, request.url.path)
    return error_response(exc, exc.status_code)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors as 400 Bad Request"""
    # report field names only, the rejected input values may hold PHI
    fields = ", ".join(
        " -> ".join(str(loc) for loc in error["loc"]) for error in exc.errors()
    )
    logger.info("Validation failed on %s: %s", request.url.path, fields)
    return error_response(ValueError(f"Request validation failed: {fields}"), 400)


def register_error_handlers(app):
    """Register all error handlers with the FastAPI app."""
    app.add_exception_handler(HTTPException, fastapi_http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
