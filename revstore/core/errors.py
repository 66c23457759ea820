"""
Centralized error handling and sanitization.

Provides:
- Standard error types for the application
- Error sanitization for production environments
- Consistent HTTP error construction for the API layer

The store itself never raises for a missing row (absence is returned as
None); storage faults propagate as SQLAlchemy errors and are only
translated here, at the HTTP boundary.
"""

import logging
from enum import Enum
from typing import Any, Optional

from fastapi import HTTPException, status

from .config import get_settings

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Standard error codes for the application"""

    # Lookup
    STRATEGY_NOT_FOUND = "STRATEGY_NOT_FOUND"
    REVISION_NOT_FOUND = "REVISION_NOT_FOUND"

    # Validation
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Storage
    DATABASE_ERROR = "DATABASE_ERROR"

    # General
    INTERNAL_ERROR = "INTERNAL_ERROR"


class AppError(Exception):
    """
    Base application error with structured information.

    Supports automatic sanitization for production environments.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[dict[str, Any]] = None,
        internal_message: Optional[str] = None,
    ):
        """
        Create an application error.

        Args:
            code: Error code enum for machine-readable identification
            message: User-friendly error message (safe to expose)
            status_code: HTTP status code
            details: Additional details (sanitized in production)
            internal_message: Detailed message for logging only (never exposed)
        """
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.internal_message = internal_message
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Response body; details are dropped in production."""
        body: dict[str, Any] = {"code": self.code.value, "message": self.message}
        if self.details and get_settings().environment != "production":
            body["details"] = self.details
        return body


def create_http_exception(
    code: ErrorCode,
    user_message: str,
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
    internal_error: Optional[Exception] = None,
    log_error: bool = True,
) -> HTTPException:
    """
    Create an HTTPException with sanitized message.

    Args:
        code: Error code for identification
        user_message: User-friendly message (shown in production)
        status_code: HTTP status code
        internal_error: Optional internal exception for logging
        log_error: Whether to log the error

    Returns:
        HTTPException ready to raise
    """
    settings = get_settings()

    if log_error and internal_error:
        logger.error(
            f"[{code.value}] {user_message}: {internal_error}",
            exc_info=internal_error,
        )
    elif log_error:
        logger.error(f"[{code.value}] {user_message}")

    if settings.environment == "production" or not internal_error:
        message = user_message
    else:
        message = f"{user_message}: {internal_error}"

    return HTTPException(
        status_code=status_code,
        detail={"code": code.value, "message": message},
    )


# ==================== Pre-built HTTP Exceptions ====================


def strategy_not_found_error(strategy_id: str) -> HTTPException:
    """404 for a strategy with no pointer row"""
    return create_http_exception(
        code=ErrorCode.STRATEGY_NOT_FOUND,
        user_message=f"Strategy '{strategy_id}' has no revision history",
        status_code=status.HTTP_404_NOT_FOUND,
        log_error=False,
    )


def revision_not_found_error(strategy_id: str, revision_id: str) -> HTTPException:
    """404 for a (strategy, revision) pair that does not exist"""
    return create_http_exception(
        code=ErrorCode.REVISION_NOT_FOUND,
        user_message=f"Revision '{revision_id}' not found for strategy '{strategy_id}'",
        status_code=status.HTTP_404_NOT_FOUND,
        log_error=False,
    )


def database_error(error: Exception, operation: str = "") -> HTTPException:
    """Create standardized storage fault error"""
    op_info = f" during {operation}" if operation else ""
    return create_http_exception(
        code=ErrorCode.DATABASE_ERROR,
        user_message=f"Storage error{op_info}. Please try again later.",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        internal_error=error,
    )
