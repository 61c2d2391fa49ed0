"""
Structured Logging

One JSON object per line on stdout, correlated with the active OpenTelemetry
span. Snapshots carry ProductBoard, Azure DevOps, OpenAI and Slack keys, so
messages are redacted before they leave the process outside development.
"""

import logging
import re
import sys
from datetime import datetime, timezone
from typing import Any, Dict, MutableMapping, Optional, Tuple

from opentelemetry import trace
from pythonjsonlogger import jsonlogger

from plansync.app.config import settings

# Patterns that might contain secrets
_SENSITIVE_PATTERNS = [
    (r'Bearer\s+[a-zA-Z0-9\-_.=]+', 'Bearer [REDACTED]'),
    (r'Basic\s+[a-zA-Z0-9+/=]+', 'Basic [REDACTED]'),
    (r'sk-[a-zA-Z0-9]{20,}', '[REDACTED_API_KEY]'),
    (r'(pb|ado|openai|slack)_api_key["\']?\s*[:=]\s*["\']?[^\s"\',}]+', r'\1_api_key: [REDACTED]'),
    (r'token["\']?\s*[:=]\s*["\']?[a-zA-Z0-9\-_.]{20,}', 'token: [REDACTED]'),
    (r'password["\']?\s*[:=]\s*["\']?[^\s"\']+', 'password: [REDACTED]'),
]

MAX_ERROR_MESSAGE_LENGTH = 500

_NOISY_LOGGERS = ("uvicorn.access", "asyncio")


def sanitize_error_message(error_msg: str) -> str:
    """Remove potential secrets from a message and truncate it."""
    sanitized = error_msg
    for pattern, replacement in _SENSITIVE_PATTERNS:
        sanitized = re.sub(pattern, replacement, sanitized, flags=re.IGNORECASE)

    if len(sanitized) > MAX_ERROR_MESSAGE_LENGTH:
        sanitized = sanitized[:MAX_ERROR_MESSAGE_LENGTH] + "... [TRUNCATED]"

    return sanitized


def should_include_stacktrace() -> bool:
    """Stack traces (and their local variables) stay out of production logs."""
    return settings.environment.lower() in ("development", "staging")


class ServiceJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter adding severity, trace context and service metadata."""

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any]
    ):
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.fromtimestamp(record.created, timezone.utc).isoformat()
        log_record["severity"] = record.levelname
        log_record["logger"] = record.name

        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            log_record["trace_id"] = f"{span_context.trace_id:032x}"
            log_record["span_id"] = f"{span_context.span_id:016x}"

        log_record["service"] = settings.app_name
        log_record["version"] = settings.app_version
        log_record["environment"] = settings.environment

        if not settings.is_development and isinstance(log_record.get("message"), str):
            log_record["message"] = sanitize_error_message(log_record["message"])


def setup_logging(log_level: Optional[str] = None) -> logging.Handler:
    """
    Route all logging through a single JSON handler on stdout.

    Args:
        log_level: Defaults to settings.log_level

    Returns:
        The installed handler
    """
    level = log_level or settings.log_level

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ServiceJsonFormatter("%(message)s", json_ensure_ascii=False))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return handler


def safe_error_log(
    logger: logging.Logger,
    message: str,
    error: Exception,
    **extra_context
) -> None:
    """Log an error, with its stack trace only outside production."""
    error_info = {
        "error_type": type(error).__name__,
        "error_module": type(error).__module__,
        **extra_context
    }

    if should_include_stacktrace():
        logger.error(message, exc_info=error, extra=error_info)
    else:
        logger.error(
            f"{message}: {sanitize_error_message(str(error))}",
            extra={**error_info, "sanitized": True}
        )


class StructuredLogger(logging.LoggerAdapter):
    """
    Logger adapter that attaches fixed context to every record.

    Keyword arguments other than the standard logging ones become extra
    fields: `log.warning("rejected", size_bytes=n)`.
    """

    _RESERVED = frozenset(("exc_info", "stack_info", "stacklevel", "extra"))

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        fields = {key: kwargs.pop(key) for key in list(kwargs) if key not in self._RESERVED}
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {}), **fields}
        if kwargs.get("exc_info") and not should_include_stacktrace():
            kwargs["exc_info"] = False
            kwargs["extra"]["stacktrace_omitted"] = True
        return msg, kwargs


def create_structured_logger(name: str, **context: Any) -> StructuredLogger:
    """
    Create a logger that tags records with `context` (operation, workspace_id, ...).

    None values are dropped.
    """
    return StructuredLogger(
        logging.getLogger(name),
        {key: value for key, value in context.items() if value is not None}
    )
