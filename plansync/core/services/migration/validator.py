"""
Snapshot Validator for workspace data export/import.

Two entry points with different failure disciplines:

- validate_export_data: strict. Any schema violation raises SchemaError and
  no snapshot is produced; the export is aborted.
- validate_import_data: lenient. Never raises. Schema failures and dangling
  workspace references are returned as data so the caller can show every
  problem in one pass before deciding whether to import.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from plansync.app.config import settings
from plansync.app.models.migration_models import (
    AIPrompt,
    Configuration,
    ExportSnapshot,
    FeatureFlag,
    FieldMapping,
    SnapshotData,
    Story,
    StoryTemplate,
    Workspace,
    WorkspaceScopedRecord,
)
from plansync.core.exceptions import PayloadTooLargeError, ReferentialError, SchemaError
from plansync.core.utils.logging import create_structured_logger

logger = logging.getLogger(__name__)

INVALID_JSON_MESSAGE = "Invalid JSON format"

M = TypeVar("M", bound=BaseModel)


@dataclass
class ImportValidationResult:
    """Outcome of validating a snapshot for import."""

    valid: bool
    errors: List[str] = field(default_factory=list)
    data: Optional[ExportSnapshot] = None
    referential_errors: List[ReferentialError] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "valid": self.valid,
            "errors": self.errors,
            "data": self.data.to_json_dict() if self.data is not None else None,
        }


# ============================================================================
# Schema validation
# ============================================================================

def format_validation_issues(error: ValidationError) -> List[str]:
    """
    Turn a pydantic ValidationError into "<location>: <message>" lines.

    Input values are left out on purpose: snapshots carry API keys.
    """
    issues = []
    for detail in error.errors(include_url=False, include_input=False):
        location = ".".join(str(part) for part in detail.get("loc", ())) or "<root>"
        issues.append(f"{location}: {detail.get('msg', 'Invalid value')}")
    return issues


def _parse(model: Type[M], raw: Any) -> M:
    if isinstance(raw, BaseModel):
        raw = raw.model_dump(mode="json", by_alias=True, exclude_unset=True)
    try:
        return model.model_validate(raw)
    except ValidationError as e:
        raise SchemaError(
            format_validation_issues(e),
            context={"model": model.__name__},
            original_error=e
        ) from e


def validate_export_data(raw: Any) -> ExportSnapshot:
    """
    Validate a full snapshot against the export schema.

    Args:
        raw: Decoded JSON (dict) or an ExportSnapshot

    Returns:
        The validated snapshot

    Raises:
        SchemaError: If any field is missing, mistyped or out of range
    """
    return _parse(ExportSnapshot, raw)


def validate_workspace(raw: Any) -> Workspace:
    return _parse(Workspace, raw)


def validate_story(raw: Any) -> Story:
    return _parse(Story, raw)


def validate_story_template(raw: Any) -> StoryTemplate:
    return _parse(StoryTemplate, raw)


def validate_configuration(raw: Any) -> Configuration:
    return _parse(Configuration, raw)


def validate_field_mapping(raw: Any) -> FieldMapping:
    return _parse(FieldMapping, raw)


def validate_feature_flag(raw: Any) -> FeatureFlag:
    return _parse(FeatureFlag, raw)


def validate_ai_prompt(raw: Any) -> AIPrompt:
    return _parse(AIPrompt, raw)


# ============================================================================
# Referential integrity
# ============================================================================

# (label used in error messages, accessor for the collection), in check order
DEPENDENT_COLLECTIONS: Sequence[Tuple[str, Callable[[SnapshotData], Optional[List[WorkspaceScopedRecord]]]]] = (
    ("Story", lambda data: data.stories),
    ("Configuration", lambda data: data.configurations),
    ("Template", lambda data: data.templates),
    ("Field mapping", lambda data: data.field_mappings),
    ("Feature flag", lambda data: data.feature_flags),
    ("AI prompt", lambda data: data.ai_prompts),
)


def check_workspace_references(snapshot: ExportSnapshot) -> List[ReferentialError]:
    """
    Find every dependent record whose workspace_id is not in the snapshot.

    All violations are collected; the check never stops at the first one.
    """
    workspace_ids = {workspace.id for workspace in snapshot.data.workspaces}
    violations: List[ReferentialError] = []

    for label, collection in DEPENDENT_COLLECTIONS:
        for record in collection(snapshot.data) or []:
            if record.workspace_id not in workspace_ids:
                violations.append(ReferentialError(
                    label=label,
                    record_id=record.id,
                    workspace_id=record.workspace_id,
                ))

    return violations


def validate_import_data(raw: Union[str, bytes, Dict[str, Any], ExportSnapshot, Any]) -> ImportValidationResult:
    """
    Validate a snapshot before import. Never raises.

    Args:
        raw: JSON text, decoded JSON or an ExportSnapshot

    Returns:
        - valid=False, errors=[schema message], data=None on schema failure
        - valid=False, errors=[one per dangling reference], data=snapshot
          when the schema passes but references are broken
        - valid=True, errors=[], data=snapshot otherwise
    """
    log = create_structured_logger(__name__, operation="validate_import")

    if isinstance(raw, (str, bytes, bytearray)):
        try:
            raw = decode_snapshot_text(raw)
        except PayloadTooLargeError as e:
            log.warning("Import snapshot rejected: too large", **e.context)
            return ImportValidationResult(valid=False, errors=[e.message])
        except (ValueError, RecursionError):
            log.warning("Import snapshot is not valid JSON")
            return ImportValidationResult(valid=False, errors=[INVALID_JSON_MESSAGE])

    try:
        snapshot = validate_export_data(raw)
    except SchemaError as e:
        log.warning("Import snapshot failed schema validation", issue_count=len(e.issues))
        return ImportValidationResult(valid=False, errors=[e.message])

    violations = check_workspace_references(snapshot)
    errors = [violation.message for violation in violations]

    if errors:
        log.warning(
            f"Import snapshot has {len(errors)} dangling workspace references",
            workspace_count=len(snapshot.data.workspaces)
        )
    else:
        log.info(
            "Import snapshot validated",
            workspace_count=len(snapshot.data.workspaces),
            story_count=len(snapshot.data.stories)
        )

    return ImportValidationResult(
        valid=not errors,
        errors=errors,
        data=snapshot,
        referential_errors=violations,
    )


def _reject_constant(token: str) -> Any:
    raise ValueError(f"Non-standard JSON constant: {token}")


def decode_snapshot_text(text: Union[str, bytes, bytearray]) -> Any:
    """
    Decode snapshot JSON text, enforcing the configured size limit.

    Raises:
        PayloadTooLargeError: If the text exceeds settings.max_import_size_bytes
        ValueError: If the text is not valid JSON (NaN and Infinity included)
        RecursionError: If the text nests deeper than the decoder can follow
    """
    size = len(text.encode("utf-8")) if isinstance(text, str) else len(text)
    if size > settings.max_import_size_bytes:
        raise PayloadTooLargeError(size, settings.max_import_size_bytes)
    if isinstance(text, (bytes, bytearray)):
        text = text.decode("utf-8")
    # A UTF-8 BOM is common in files saved by Windows editors
    return json.loads(text.lstrip("\ufeff"), parse_constant=_reject_constant)


# ============================================================================
# Export helpers
# ============================================================================

def _isoformat_millis(moment: datetime) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix."""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def create_export_snapshot(
    workspaces: Sequence[Any],
    stories: Sequence[Any] = (),
    configurations: Sequence[Any] = (),
    templates: Sequence[Any] = (),
    field_mappings: Sequence[Any] = (),
    feature_flags: Sequence[Any] = (),
    ai_prompts: Sequence[Any] = (),
    now: Optional[datetime] = None,
) -> ExportSnapshot:
    """
    Assemble and validate a snapshot envelope for download.

    Raises:
        SchemaError: If any record does not match the export schema
    """
    def plain(records: Sequence[Any]) -> List[Any]:
        return [
            record.model_dump(mode="json", exclude_unset=True) if isinstance(record, BaseModel) else record
            for record in records
        ]

    moment = now or datetime.now(timezone.utc)
    envelope = {
        "version": settings.snapshot_version,
        "timestamp": _isoformat_millis(moment),
        "data": {
            "workspaces": plain(workspaces),
            "stories": plain(stories),
            "configurations": plain(configurations),
            "templates": plain(templates),
            "fieldMappings": plain(field_mappings),
            "featureFlags": plain(feature_flags),
            "aiPrompts": plain(ai_prompts),
        },
    }

    snapshot = validate_export_data(envelope)
    logger.info(
        "Export snapshot created",
        extra={
            "workspace_count": len(snapshot.data.workspaces),
            "story_count": len(snapshot.data.stories),
            "snapshot_version": snapshot.version
        }
    )
    return snapshot


def export_filename(now: Optional[datetime] = None) -> str:
    """Download filename for an export, e.g. pbtoado-export-2025-01-01T00-00-00.000Z.json"""
    moment = now or datetime.now(timezone.utc)
    return f"pbtoado-export-{_isoformat_millis(moment).replace(':', '-')}.json"
