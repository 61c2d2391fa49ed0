"""
Error Handling Tests

Tests structured exceptions, router error conversion and secret redaction.
"""

import json
import logging

from fastapi import HTTPException

from plansync.core.exceptions import (
    ErrorCategory,
    ErrorCode,
    PayloadTooLargeError,
    ReferentialError,
    SchemaError,
)
from plansync.core.utils.error_handling import generate_error_id, safe_error_response
from plansync.core.utils.logging import (
    ServiceJsonFormatter,
    create_structured_logger,
    sanitize_error_message,
)


class TestExceptions:
    """Tests for the structured exception types."""

    def test_schema_error_to_dict(self):
        error = SchemaError(["data.version: Input should be a valid string", "data.workspaces: Field required"])

        result = error.to_dict()

        assert result["error"] == "INVALID_SCHEMA"
        assert result["category"] == "VALIDATION"
        assert result["http_status"] == 422
        assert result["message"] == "data.version: Input should be a valid string; data.workspaces: Field required"
        assert len(result["issues"]) == 2

    def test_schema_error_without_issues(self):
        assert SchemaError([]).message == "Invalid snapshot"

    def test_payload_too_large(self):
        error = PayloadTooLargeError(2_000, 1_000)

        assert error.http_status == 413
        assert error.context == {"size_bytes": 2_000, "max_bytes": 1_000}

    def test_referential_error(self):
        error = ReferentialError(label="AI prompt", record_id="p-1", workspace_id="w-9")

        assert str(error) == "AI prompt p-1 references non-existent workspace w-9"
        assert error.category == ErrorCategory.INTEGRITY
        assert error.error_code == ErrorCode.DANGLING_WORKSPACE_REFERENCE


class TestSafeErrorResponse:
    """Tests for safe_error_response."""

    def test_http_exception_passthrough(self):
        original = HTTPException(status_code=400, detail="bad")

        assert safe_error_response(original) is original

    def test_plansync_exception_keeps_status(self):
        response = safe_error_response(SchemaError(["x: bad"]), operation="snapshot export")

        assert response.status_code == 422
        assert response.detail["issues"] == ["x: bad"]

    def test_unexpected_error_is_hidden(self):
        response = safe_error_response(RuntimeError("pb_api_key=abc123 leaked"), operation="hierarchy build")

        assert response.status_code == 500
        assert "abc123" not in str(response.detail)
        assert response.detail["error_id"].startswith("ERR-")
        assert "hierarchy build" in response.detail["message"]

    def test_error_ids_are_unique(self):
        assert generate_error_id() != generate_error_id()


class TestSanitizeErrorMessage:
    """Tests for sanitize_error_message."""

    def test_api_keys_redacted(self):
        message = sanitize_error_message('failed: {"pb_api_key": "pb-123", "ado_api_key": "ado-456"}')

        assert "pb-123" not in message
        assert "ado-456" not in message
        assert "pb_api_key: [REDACTED]" in message

    def test_bearer_token_redacted(self):
        assert sanitize_error_message("Authorization: Bearer abc.def.ghi") == "Authorization: Bearer [REDACTED]"

    def test_long_message_truncated(self):
        message = sanitize_error_message("x" * 1_000)

        assert message.endswith("... [TRUNCATED]")
        assert len(message) == 500 + len("... [TRUNCATED]")


def test_structured_logger_adds_context(caplog):
    log = create_structured_logger("plansync.tests", workspace_id="w-1", operation="validate_import")

    with caplog.at_level(logging.INFO, logger="plansync.tests"):
        log.info("validated", story_count=3)

    record = caplog.records[-1]
    assert record.workspace_id == "w-1"
    assert record.operation == "validate_import"
    assert record.story_count == 3


class TestServiceJsonFormatter:
    """Tests for the JSON log formatter."""

    @staticmethod
    def render(message):
        record = logging.LogRecord("plansync.tests", logging.WARNING, __file__, 1, message, None, None)
        return json.loads(ServiceJsonFormatter("%(message)s").format(record))

    def test_service_fields(self):
        payload = self.render("snapshot rejected")

        assert payload["message"] == "snapshot rejected"
        assert payload["severity"] == "WARNING"
        assert payload["logger"] == "plansync.tests"
        assert payload["service"] == "plansync-service"
        assert "trace_id" not in payload

    def test_message_redacted_outside_development(self, monkeypatch):
        from plansync.app.config import settings

        monkeypatch.setattr(settings, "environment", "production")

        payload = self.render('bad workspace {"ado_api_key": "ado-456"}')

        assert "ado-456" not in payload["message"]
        assert payload["environment"] == "production"
