"""
Structured Error Handling
Provides error hierarchy with categorization, error codes, and structured context.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCategory(str, Enum):
    """Error categories for classification and handling."""
    VALIDATION = "VALIDATION"  # Snapshot/payload shape errors
    INTEGRITY = "INTEGRITY"  # Cross-record reference errors
    PERMANENT = "PERMANENT"  # Errors that won't succeed on retry


class ErrorCode(str, Enum):
    """Standardized error codes for monitoring and debugging."""
    INVALID_SCHEMA = "INVALID_SCHEMA"
    INVALID_PAYLOAD = "INVALID_PAYLOAD"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
    DANGLING_WORKSPACE_REFERENCE = "DANGLING_WORKSPACE_REFERENCE"


class PlanSyncException(Exception):
    """
    Base exception for all PlanSync errors.

    Provides structured error information for API responses and logging.
    """

    def __init__(
        self,
        message: str,
        category: ErrorCategory,
        error_code: ErrorCode,
        http_status: int = 500,
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None
    ):
        """
        Initialize structured exception.

        Args:
            message: Human-readable error message
            category: Error category for classification
            error_code: Standardized error code
            http_status: HTTP status code to return
            context: Additional context (collection, record id, etc.)
            original_error: Original exception if wrapped
        """
        super().__init__(message)
        self.message = message
        self.category = category
        self.error_code = error_code
        self.http_status = http_status
        self.context = context or {}
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        result = {
            "error": self.error_code.value,
            "message": self.message,
            "category": self.category.value,
            "http_status": self.http_status
        }

        if self.context:
            result["context"] = self.context

        return result


class SchemaError(PlanSyncException):
    """
    Structural or type violation in a snapshot or record.

    Raised by the strict export path; no partial result is produced.
    `issues` holds one "<location>: <message>" line per violation.
    """

    def __init__(
        self,
        issues: List[str],
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None
    ):
        self.issues = list(issues)
        message = "; ".join(self.issues) if self.issues else "Invalid snapshot"
        super().__init__(
            message=message,
            category=ErrorCategory.VALIDATION,
            error_code=ErrorCode.INVALID_SCHEMA,
            http_status=422,
            context=context,
            original_error=original_error
        )

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["issues"] = self.issues
        return result


class PayloadTooLargeError(PlanSyncException):
    """Snapshot text exceeds the configured import size limit."""

    def __init__(self, size_bytes: int, max_bytes: int):
        super().__init__(
            message=f"Snapshot is {size_bytes} bytes, limit is {max_bytes} bytes",
            category=ErrorCategory.VALIDATION,
            error_code=ErrorCode.PAYLOAD_TOO_LARGE,
            http_status=413,
            context={"size_bytes": size_bytes, "max_bytes": max_bytes}
        )


@dataclass(frozen=True)
class ReferentialError:
    """
    A dependent record whose workspace_id is not among the snapshot's workspaces.

    Collected into import validation results, never raised.
    """

    label: str
    record_id: str
    workspace_id: str
    category: ErrorCategory = ErrorCategory.INTEGRITY
    error_code: ErrorCode = ErrorCode.DANGLING_WORKSPACE_REFERENCE

    @property
    def message(self) -> str:
        return f"{self.label} {self.record_id} references non-existent workspace {self.workspace_id}"

    def __str__(self) -> str:
        return self.message
