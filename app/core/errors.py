"""
Error Handling Utilities
Provides sanitized error messages and consistent error responses.
"""

import logging
from enum import Enum
from typing import Any, Optional

from fastapi import HTTPException, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.auth.exceptions import CredentialServiceError, StoreUnavailable

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Error codes for frontend handling."""

    # Sign-in errors
    INVALID_CREDENTIALS = "invalid_credentials"
    TOO_MANY_ATTEMPTS = "too_many_attempts"
    AUTH_SERVICE_UNAVAILABLE = "auth_service_unavailable"

    # Administration errors
    LOCKOUT_NOT_FOUND = "lockout_not_found"
    LOCKOUT_STORE_UNAVAILABLE = "lockout_store_unavailable"

    # General errors
    VALIDATION_ERROR = "validation_error"
    INTERNAL_ERROR = "internal_error"


# User-friendly error messages
ERROR_MESSAGES = {
    ErrorCode.INVALID_CREDENTIALS: "Invalid email or password.",
    ErrorCode.TOO_MANY_ATTEMPTS: "Too many login attempts. Please try again later.",
    ErrorCode.AUTH_SERVICE_UNAVAILABLE: "Sign-in is temporarily unavailable. Please try again in a moment.",
    ErrorCode.LOCKOUT_NOT_FOUND: "No login attempts are recorded for this client.",
    ErrorCode.LOCKOUT_STORE_UNAVAILABLE: "Login attempt records are temporarily unavailable.",
    ErrorCode.VALIDATION_ERROR: "Invalid request. Please check your input and try again.",
    ErrorCode.INTERNAL_ERROR: "An unexpected error occurred. Please try again later.",
}

# Default HTTP status per error code
ERROR_STATUS = {
    ErrorCode.INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.TOO_MANY_ATTEMPTS: status.HTTP_429_TOO_MANY_REQUESTS,
    ErrorCode.AUTH_SERVICE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.LOCKOUT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.LOCKOUT_STORE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
}


def sanitize_error_message(
    exception: Exception,
    error_code: ErrorCode,
    log_details: bool = True,
) -> str:
    """
    Sanitize error message for user-facing responses.

    Logs full exception details internally but returns user-friendly message.

    Args:
        exception: The exception that occurred
        error_code: Error code for categorization
        log_details: Whether to log full exception details

    Returns:
        User-friendly error message
    """
    if log_details:
        logger.error(
            "Error [%s]: %s",
            error_code.value,
            str(exception),
            exc_info=exception,
        )

    return ERROR_MESSAGES.get(error_code, ERROR_MESSAGES[ErrorCode.INTERNAL_ERROR])


def get_error_code_for_exception(exception: Exception) -> tuple[ErrorCode, int]:
    """
    Map exception types to error codes and HTTP status codes.

    Args:
        exception: The exception that occurred

    Returns:
        Tuple of (error_code, http_status_code)
    """
    if isinstance(exception, CredentialServiceError):
        return ErrorCode.AUTH_SERVICE_UNAVAILABLE, status.HTTP_503_SERVICE_UNAVAILABLE

    if isinstance(exception, StoreUnavailable):
        return ErrorCode.LOCKOUT_STORE_UNAVAILABLE, status.HTTP_503_SERVICE_UNAVAILABLE

    if isinstance(exception, ValueError):
        return ErrorCode.VALIDATION_ERROR, status.HTTP_400_BAD_REQUEST

    # Default to internal error
    return ErrorCode.INTERNAL_ERROR, status.HTTP_500_INTERNAL_SERVER_ERROR


async def global_exception_handler(_request, exc: Exception) -> JSONResponse:
    """
    Global exception handler for FastAPI.

    Catches all unhandled exceptions and returns sanitized error responses.
    Excludes HTTPException (intentional responses) and ValidationError (FastAPI validation).
    """
    # Don't handle HTTPException - those are intentional responses
    if isinstance(exc, HTTPException):
        raise exc

    # Don't handle RequestValidationError - FastAPI handles this
    if isinstance(exc, RequestValidationError):
        raise exc

    error_code, http_status = get_error_code_for_exception(exc)
    message = sanitize_error_message(exc, error_code)

    return JSONResponse(
        status_code=http_status,
        content={
            "error_code": error_code.value,
            "message": message,
        },
    )


def create_error_response(
    error_code: ErrorCode,
    message: Optional[str] = None,
    http_status: Optional[int] = None,
    extra: Optional[dict[str, Any]] = None,
    headers: Optional[dict[str, str]] = None,
) -> HTTPException:
    """
    Create a standardized HTTPException with error code.

    Args:
        error_code: Error code enum
        message: Optional custom message (uses default if not provided)
        http_status: Optional HTTP status code (uses default if not provided)
        extra: Additional machine-readable fields merged into the detail
        headers: Optional response headers (e.g. Retry-After)

    Returns:
        HTTPException with standardized format
    """
    if message is None:
        message = ERROR_MESSAGES.get(error_code, ERROR_MESSAGES[ErrorCode.INTERNAL_ERROR])

    if http_status is None:
        http_status = ERROR_STATUS.get(error_code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    detail: dict[str, Any] = {
        "error_code": error_code.value,
        "message": message,
    }
    if extra:
        detail.update(extra)

    return HTTPException(
        status_code=http_status,
        detail=detail,
        headers=headers,
    )
