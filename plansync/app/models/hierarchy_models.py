"""
Pydantic models for planning hierarchy trees.

This module provides:
- HierarchyNode: an entity decorated with its children
- HierarchyReport: diagnostics gathered while assembling a forest
- Request/response models for the hierarchy API
- ParentKind / ParentRef for ProductBoard parent references
"""

from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ============================================================================
# ENUMS
# ============================================================================

class ParentKind(str, Enum):
    """Kinds of ProductBoard entities a feature can be nested under."""
    FEATURE = "feature"
    COMPONENT = "component"
    INITIATIVE = "initiative"
    PRODUCT = "product"
    UNKNOWN = "unknown"


# ============================================================================
# CORE MODELS
# ============================================================================

class ParentRef(BaseModel):
    """Parent reference extracted from a ProductBoard `parent` object."""
    kind: ParentKind
    id: str

    model_config = ConfigDict(frozen=True)


class HierarchyNode(BaseModel):
    """
    An entity plus its child nodes.

    All fields of the source entity are carried as extra attributes
    (`node.id`, `node.name`, ...). `expanded` is a UI flag and is always
    False on freshly built nodes.
    """
    children: List["HierarchyNode"] = Field(default_factory=list)
    expanded: bool = False

    model_config = ConfigDict(extra="allow")

    @classmethod
    def from_fields(cls, fields: Dict[Any, Any]) -> "HierarchyNode":
        """
        Build a collapsed, childless node carrying a copy of `fields`.

        Keys are stored as given, so non-string keys survive and no field
        is validated. Any `children` or `expanded` key in `fields` is ignored.
        """
        node = cls.model_construct(children=[], expanded=False)
        extra = {key: value for key, value in fields.items() if key not in ("children", "expanded")}
        object.__setattr__(node, "__pydantic_extra__", extra)
        return node

    def get(self, key: str, default: Any = None) -> Any:
        """Read an entity field, dict-style."""
        extra = self.__pydantic_extra__ or {}
        return extra.get(key, default)


class HierarchyReport(BaseModel):
    """Diagnostics for a single hierarchy build."""
    total: int = Field(..., ge=0, description="Number of input entities")
    root_count: int = Field(..., ge=0, description="Number of top-level nodes")
    orphan_ids: List[str] = Field(
        default_factory=list,
        description="Entities whose parent reference was set but not found (promoted to roots)"
    )
    duplicate_ids: List[str] = Field(
        default_factory=list,
        description="Ids seen more than once (last occurrence wins in the lookup)"
    )
    unreachable_ids: List[str] = Field(
        default_factory=list,
        description="Ids not reachable from any root, i.e. caught in a parent cycle"
    )
    unkeyed_ids: List[str] = Field(
        default_factory=list,
        description="Ids that cannot be used as lookup keys (unhashable); kept as roots"
    )

    @property
    def is_clean(self) -> bool:
        return not (self.orphan_ids or self.duplicate_ids or self.unreachable_ids or self.unkeyed_ids)


# ============================================================================
# REQUEST MODELS
# ============================================================================

FIELD_NAME_PATTERN = r'^[A-Za-z_][A-Za-z0-9_]{0,63}$'


class BuildHierarchyRequest(BaseModel):
    """Request model for building a forest from a flat entity list."""
    entities: List[Dict[str, Any]] = Field(
        ...,
        description="Flat list of entities, each with an id and optional parent reference"
    )
    id_field: str = Field(
        default="id",
        pattern=FIELD_NAME_PATTERN,
        description="Name of the identity field"
    )
    parent_field: str = Field(
        default="parent_id",
        pattern=FIELD_NAME_PATTERN,
        description="Name of the parent reference field"
    )

    model_config = ConfigDict(extra="forbid", json_schema_extra={
        "example": {
            "entities": [
                {"id": "a", "parent_id": None},
                {"id": "b", "parent_id": "a"},
                {"id": "c", "parent_id": "z"}
            ],
            "id_field": "id",
            "parent_field": "parent_id"
        }
    })

    @field_validator('parent_field')
    @classmethod
    def validate_distinct_fields(cls, v: str, info) -> str:
        if v == info.data.get("id_field"):
            raise ValueError("parent_field must differ from id_field")
        return v


class FeatureHierarchyRequest(BaseModel):
    """Request model for ProductBoard feature trees (raw API payloads or stored rows)."""
    features: List[Dict[str, Any]] = Field(..., description="ProductBoard features")

    model_config = ConfigDict(extra="forbid")


class WorkItemHierarchyRequest(BaseModel):
    """Request model for Azure DevOps Epic -> Feature -> User Story trees."""
    epics: List[Dict[str, Any]] = Field(default_factory=list)
    features: List[Dict[str, Any]] = Field(default_factory=list)
    stories: List[Dict[str, Any]] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


# ============================================================================
# RESPONSE MODELS
# ============================================================================

class HierarchyTreeResponse(BaseModel):
    """Response model for a built forest."""
    roots: List[Dict[str, Any]] = Field(..., description="Top-level nodes with nested children")
    report: HierarchyReport


HierarchyNode.model_rebuild()
