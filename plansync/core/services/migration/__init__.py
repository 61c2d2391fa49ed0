"""
Workspace Data Migration Service

Schema and referential-integrity validation for export/import snapshots.

Usage:
    from plansync.core.services.migration import validate_import_data

    result = validate_import_data(payload)
    if not result.valid:
        show(result.errors)
"""

from plansync.core.services.migration.validator import (
    ImportValidationResult,
    check_workspace_references,
    create_export_snapshot,
    decode_snapshot_text,
    export_filename,
    validate_ai_prompt,
    validate_configuration,
    validate_export_data,
    validate_feature_flag,
    validate_field_mapping,
    validate_import_data,
    validate_story,
    validate_story_template,
    validate_workspace,
)

__all__ = [
    "ImportValidationResult",
    "check_workspace_references",
    "create_export_snapshot",
    "decode_snapshot_text",
    "export_filename",
    "validate_ai_prompt",
    "validate_configuration",
    "validate_export_data",
    "validate_feature_flag",
    "validate_field_mapping",
    "validate_import_data",
    "validate_story",
    "validate_story_template",
    "validate_workspace",
]
