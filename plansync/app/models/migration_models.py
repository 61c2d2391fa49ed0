"""
Pydantic models for workspace data export/import snapshots.

A snapshot bundles every exportable record for one or more workspaces:

    {
      "version": "1.0",
      "timestamp": "2025-01-01T00:00:00.000Z",
      "data": {
        "workspaces": [...], "stories": [...], "configurations": [...],
        "templates": [...], "fieldMappings": [...],
        "featureFlags": [...], "aiPrompts": [...]
      }
    }

Field types are strict: strings never accept numbers, numbers never accept
strings, booleans or NaN/Infinity, booleans never accept 0/1. Unknown keys are dropped.
Nullable fields must still be present; omittable fields may be left out but
never set to null, and are left out again when dumped.
"""

import re
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional, Union

from pydantic import (
    AfterValidator,
    AllowInfNan,
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
)


UUID_PATTERN = re.compile(
    r'^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$'
)


def _check_uuid(value: str) -> str:
    if not UUID_PATTERN.fullmatch(value):
        raise ValueError("Invalid uuid")
    return value


UuidStr = Annotated[StrictStr, AfterValidator(_check_uuid)]
Number = Union[StrictInt, Annotated[StrictFloat, AllowInfNan(False)]]


# ============================================================================
# ENUMS
# ============================================================================

class TemplateLevel(str, Enum):
    """Work item level a story template targets."""
    EPIC = "epic"
    FEATURE = "feature"
    STORY = "story"


class MappingType(str, Enum):
    """How a ProductBoard field is carried over to Azure DevOps."""
    DIRECT = "direct"
    TRANSFORM = "transform"
    LOOKUP = "lookup"
    EPIC_BUSINESS_UNIT = "epic_business_unit"
    FEATURE_PRODUCT_CODE = "feature_product_code"
    STORY_TEAM = "story_team"


# ============================================================================
# RECORD MODELS
# ============================================================================

class SnapshotRecord(BaseModel):
    """Fields shared by every exported record."""
    id: UuidStr
    created_at: StrictStr
    updated_at: StrictStr

    model_config = ConfigDict(extra="ignore")


class WorkspaceScopedRecord(SnapshotRecord):
    """A record owned by a workspace."""
    workspace_id: UuidStr


class Workspace(SnapshotRecord):
    """ProductBoard board <-> Azure DevOps project pairing."""
    name: StrictStr = Field(..., min_length=1)
    pb_board_id: StrictStr
    ado_project_id: StrictStr
    pb_api_key: StrictStr
    ado_api_key: StrictStr
    sync_frequency: StrictStr
    last_sync_timestamp: Optional[StrictStr]


class RiceScore(BaseModel):
    """Reach / Impact / Confidence / Effort prioritization score."""
    reach: Number
    impact: Number
    confidence: Number
    effort: Number
    total: Number

    model_config = ConfigDict(extra="ignore")


class Story(WorkspaceScopedRecord):
    """A ProductBoard feature tracked against its Azure DevOps work item."""
    pb_id: StrictStr
    pb_title: StrictStr
    ado_id: Optional[StrictStr]
    ado_title: Optional[StrictStr]
    description: Optional[StrictStr]
    status: StrictStr
    story_points: Optional[Number]
    completion_percentage: Number
    sync_status: StrictStr
    needs_split: StrictBool
    rice_score: Optional[RiceScore]
    sprintable: Optional[StrictBool]
    completeness_score: Optional[Number]
    notes: Optional[StrictStr]


class TemplateData(BaseModel):
    """Templated defaults applied when creating work items."""
    # Members may be absent but not null
    title_template: StrictStr = None
    description_template: StrictStr = None
    acceptance_criteria_template: List[StrictStr] = None
    product_line: StrictStr = None
    growth_driver: StrictStr = None
    investment_category: StrictStr = None

    model_config = ConfigDict(extra="ignore")


class StoryTemplate(WorkspaceScopedRecord):
    name: StrictStr
    description: Optional[StrictStr]
    level: TemplateLevel
    template_data: TemplateData


class Configuration(WorkspaceScopedRecord):
    """Per-workspace integration and propagation settings."""
    openai_api_key: Optional[StrictStr]
    slack_api_key: Optional[StrictStr]
    slack_channel_id: Optional[StrictStr]
    google_spaces_webhook_url: Optional[StrictStr]
    field_propagation_enabled: StrictBool
    epic_to_feature_rules: Dict[str, Any]
    feature_to_story_rules: Dict[str, Any]
    risk_threshold_days: Number


class FieldMapping(WorkspaceScopedRecord):
    pb_field: StrictStr
    ado_field: StrictStr
    mapping_type: MappingType
    mapping_rules: Dict[str, Any]


class FeatureFlag(WorkspaceScopedRecord):
    name: StrictStr
    description: Optional[StrictStr]
    enabled: StrictBool
    conditions: Dict[str, Any]
    deleted_at: Optional[StrictStr]


class AIPrompt(WorkspaceScopedRecord):
    name: StrictStr
    description: Optional[StrictStr]
    prompt_template: StrictStr
    category: StrictStr


# ============================================================================
# SNAPSHOT MODELS
# ============================================================================

class SnapshotData(BaseModel):
    """Record collections of a snapshot. JSON keys are camelCase."""
    workspaces: List[Workspace]
    stories: List[Story]
    configurations: List[Configuration]
    templates: List[StoryTemplate]
    field_mappings: List[FieldMapping] = Field(..., alias="fieldMappings")
    # Absent in older exports; null is rejected
    feature_flags: List[FeatureFlag] = Field(default=None, alias="featureFlags")
    ai_prompts: List[AIPrompt] = Field(default=None, alias="aiPrompts")

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ExportSnapshot(BaseModel):
    """Versioned bundle of all exportable records."""
    version: StrictStr
    timestamp: StrictStr
    data: SnapshotData

    model_config = ConfigDict(extra="ignore", json_schema_extra={
        "example": {
            "version": "1.0",
            "timestamp": "2025-01-01T00:00:00.000Z",
            "data": {
                "workspaces": [],
                "stories": [],
                "configurations": [],
                "templates": [],
                "fieldMappings": []
            }
        }
    })

    def to_json_dict(self) -> Dict[str, Any]:
        """Plain JSON-compatible dict using the snapshot's camelCase keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


# ============================================================================
# RESPONSE MODELS
# ============================================================================

class ImportValidationResponse(BaseModel):
    """Response model for import validation. Always returned with HTTP 200."""
    valid: bool
    errors: List[str] = Field(default_factory=list)
    data: Optional[ExportSnapshot] = None
