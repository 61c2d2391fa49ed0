"""
Centralized Error Handling Utility
Provides secure error responses that prevent information leakage.

Never expose implementation details (or snapshot secrets) to clients: routes
convert unexpected failures into a generic message plus a tracking ID, and the
full details are logged server-side only.
"""

import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import HTTPException, status

from plansync.core.exceptions import PlanSyncException
from plansync.core.utils.logging import safe_error_log

logger = logging.getLogger(__name__)

_SENSITIVE_KEYS = {"password", "credential", "api_key", "secret", "token", "webhook"}


def generate_error_id() -> str:
    """Generate a unique error ID for tracking."""
    return f"ERR-{uuid.uuid4().hex[:12].upper()}"


def _sanitize_context(context: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    sanitized: Dict[str, Any] = {}
    for key, value in (context or {}).items():
        if any(s in key.lower() for s in _SENSITIVE_KEYS):
            sanitized[key] = "[REDACTED]"
        else:
            sanitized[key] = value
    return sanitized


def handle_plansync_error(error: PlanSyncException, operation: str) -> HTTPException:
    """
    Convert a structured PlanSync error into an HTTPException.

    These errors are expected (bad payloads), so they are logged at warning
    level and their message is safe to return to the caller.
    """
    logger.warning(
        f"{error.error_code.value} during {operation}",
        extra={"operation": operation, **_sanitize_context(error.context)}
    )
    return HTTPException(status_code=error.http_status, detail=error.to_dict())


def safe_error_response(
    error: Exception,
    operation: str = "operation",
    context: Optional[Dict[str, Any]] = None
) -> HTTPException:
    """
    Safely handle any error with appropriate response.

    This is the main entry point for error handling in routers.

    Args:
        error: The exception that occurred
        operation: Description of the operation that failed
        context: Additional context for logging

    Returns:
        HTTPException with appropriate status and message
    """
    if isinstance(error, HTTPException):
        return error

    if isinstance(error, PlanSyncException):
        return handle_plansync_error(error, operation)

    error_id = generate_error_id()
    safe_error_log(
        logger,
        f"Error {error_id} during {operation}",
        error,
        error_id=error_id,
        operation=operation,
        **_sanitize_context(context)
    )

    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "error": "internal",
            "message": f"Failed to complete {operation}. Please try again or contact support.",
            "error_id": error_id,
            "support_message": f"Please provide error ID {error_id} when contacting support."
        }
    )
