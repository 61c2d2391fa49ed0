"""
Pydantic models for the PlanSync API.
"""

from plansync.app.models.hierarchy_models import (
    BuildHierarchyRequest,
    FeatureHierarchyRequest,
    HierarchyNode,
    HierarchyReport,
    HierarchyTreeResponse,
    ParentKind,
    ParentRef,
    WorkItemHierarchyRequest,
)
from plansync.app.models.migration_models import (
    AIPrompt,
    Configuration,
    ExportSnapshot,
    FeatureFlag,
    FieldMapping,
    ImportValidationResponse,
    MappingType,
    SnapshotData,
    Story,
    StoryTemplate,
    TemplateLevel,
    Workspace,
)

__all__ = [
    # Hierarchy
    "BuildHierarchyRequest",
    "FeatureHierarchyRequest",
    "HierarchyNode",
    "HierarchyReport",
    "HierarchyTreeResponse",
    "ParentKind",
    "ParentRef",
    "WorkItemHierarchyRequest",
    # Migration
    "AIPrompt",
    "Configuration",
    "ExportSnapshot",
    "FeatureFlag",
    "FieldMapping",
    "ImportValidationResponse",
    "MappingType",
    "SnapshotData",
    "Story",
    "StoryTemplate",
    "TemplateLevel",
    "Workspace",
]
