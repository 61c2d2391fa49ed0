"""
Hierarchy Builder.

Turns a flat list of planning entities (ProductBoard initiatives/features,
stored stories, Azure DevOps work items) into an ordered forest of
HierarchyNodes for tree/explorer views.

Rules:
- An entity whose parent reference matches another entity's id becomes that
  entity's child; children keep input order.
- An entity with no parent reference, or one that points outside the input,
  becomes a root (orphan promotion).
- Duplicate ids: the last occurrence wins in the lookup.
- Ids that cannot be hashed are kept as roots and can never be a parent.
- Parent cycles are not rejected; nodes caught in one are simply not
  reachable from any root. They are reported, never raised.

The forest is rebuilt from scratch on every call; nothing is cached.
"""

import logging
from collections.abc import Hashable, Mapping
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set

from pydantic import BaseModel

from plansync.app.config import settings
from plansync.app.models.hierarchy_models import HierarchyNode, HierarchyReport
from plansync.core.services.hierarchy.parents import (
    extract_parent_ref,
    normalize_productboard_feature,
    parent_id_from_relations,
)
from plansync.core.services.hierarchy.structure import detect_cycles, iter_nodes

logger = logging.getLogger(__name__)

PRODUCTBOARD_ID_FIELD = "productboard_id"
PRODUCTBOARD_PARENT_FIELD = "parent_productboard_id"


@dataclass
class HierarchyBuildResult:
    """Forest plus build diagnostics."""

    roots: List[HierarchyNode]
    report: HierarchyReport


def _entity_fields(entity: Any) -> Dict[Any, Any]:
    """Shallow copy of an entity's fields, whatever its container type."""
    if isinstance(entity, HierarchyNode):
        return dict(entity.__pydantic_extra__ or {})
    if isinstance(entity, Mapping):
        return dict(entity)
    if isinstance(entity, BaseModel):
        return entity.model_dump()
    if hasattr(entity, "_asdict"):
        return dict(entity._asdict())
    if hasattr(entity, "__dict__"):
        return dict(vars(entity))

    # __slots__ classes; anything else has no fields
    fields: Dict[Any, Any] = {}
    for klass in type(entity).__mro__:
        slots = getattr(klass, "__slots__", ())
        for name in (slots,) if isinstance(slots, str) else slots:
            if name not in fields and hasattr(entity, name):
                fields[name] = getattr(entity, name)
    return fields


def _hashable(value: Any) -> bool:
    try:
        hash(value)
    except TypeError:
        return False
    return True


def _resolve_reference(value: Any) -> Optional[Hashable]:
    """Normalize a parent reference value; None means "no parent"."""
    if isinstance(value, Mapping):
        parent_ref = extract_parent_ref(value)
        return parent_ref.id if parent_ref else None
    if value is None or (isinstance(value, str) and not value) or not _hashable(value):
        return None
    return value


def build_hierarchy_with_report(
    entities: Iterable[Any],
    id_field: str = "id",
    parent_field: str = "parent_id",
) -> HierarchyBuildResult:
    """
    Build a forest from flat entities and collect diagnostics.

    Args:
        entities: Mappings, pydantic models or plain objects
        id_field: Name of the identity field
        parent_field: Name of the parent reference field

    Returns:
        HierarchyBuildResult with the root nodes in input order
    """
    rows = [_entity_fields(entity) for entity in entities]

    # First pass: one node per id (last write wins)
    lookup: Dict[Any, HierarchyNode] = {}
    keys: List[Any] = []
    duplicate_ids: List[str] = []
    seen_duplicates: Set[Any] = set()
    unkeyed_ids: List[str] = []
    for row in rows:
        entity_id = row.get(id_field)
        if not _hashable(entity_id):
            # Private key: the node can become a root but never a parent
            unkeyed_ids.append(str(entity_id))
            entity_id = object()
        elif entity_id in lookup and entity_id not in seen_duplicates:
            seen_duplicates.add(entity_id)
            duplicate_ids.append(str(entity_id))
        keys.append(entity_id)
        lookup[entity_id] = HierarchyNode.from_fields(row)

    # Second pass: attach to parent or promote to root, in input order
    roots: List[HierarchyNode] = []
    orphan_ids: List[str] = []
    for row, key in zip(rows, keys):
        node = lookup[key]
        parent_ref = _resolve_reference(row.get(parent_field))
        if parent_ref is not None and parent_ref in lookup:
            lookup[parent_ref].children.append(node)
        else:
            if parent_ref is not None:
                orphan_ids.append(str(row.get(id_field)))
            roots.append(node)

    reached = {id(node) for node in iter_nodes(roots)}
    unreachable_ids = [
        str(entity_id) for entity_id, node in lookup.items() if id(node) not in reached
    ]

    report = HierarchyReport(
        total=len(rows),
        root_count=len(roots),
        orphan_ids=orphan_ids,
        duplicate_ids=duplicate_ids,
        unreachable_ids=unreachable_ids,
        unkeyed_ids=unkeyed_ids,
    )

    if settings.hierarchy_log_diagnostics and not report.is_clean:
        _log_report(report, rows, id_field, parent_field)

    return HierarchyBuildResult(roots=roots, report=report)


def _log_report(
    report: HierarchyReport,
    rows: Sequence[Dict[str, Any]],
    id_field: str,
    parent_field: str,
) -> None:
    if report.orphan_ids:
        logger.warning(
            f"Promoted {len(report.orphan_ids)} entities with unknown parents to roots",
            extra={"orphan_ids": report.orphan_ids[:50], "id_field": id_field}
        )
    if report.duplicate_ids:
        logger.warning(
            f"Duplicate ids in hierarchy input, last occurrence kept: {len(report.duplicate_ids)}",
            extra={"duplicate_ids": report.duplicate_ids[:50], "id_field": id_field}
        )
    if report.unkeyed_ids:
        logger.warning(
            f"{len(report.unkeyed_ids)} entities have unhashable ids and were kept as roots",
            extra={"unkeyed_ids": report.unkeyed_ids[:50], "id_field": id_field}
        )
    if report.unreachable_ids:
        cycles = detect_cycles(
            rows,
            get_id=lambda row: row.get(id_field) if _hashable(row.get(id_field)) else None,
            get_parent=lambda row: _resolve_reference(row.get(parent_field)),
        )
        logger.warning(
            f"{len(report.unreachable_ids)} entities are unreachable from any root (parent cycle)",
            extra={"unreachable_ids": report.unreachable_ids[:50], "cycles": cycles[:10]}
        )


def build_hierarchy(
    entities: Iterable[Any],
    id_field: str = "id",
    parent_field: str = "parent_id",
) -> List[HierarchyNode]:
    """Build a forest from flat entities. Never raises on malformed hierarchy input."""
    return build_hierarchy_with_report(entities, id_field, parent_field).roots


def build_feature_hierarchy(features: Iterable[Any]) -> HierarchyBuildResult:
    """
    Build a ProductBoard feature tree.

    Accepts raw API payloads (nested `parent` objects, optional `data`
    envelope) or stored feature rows keyed by `productboard_id`.
    """
    rows = [normalize_productboard_feature(_entity_fields(feature)) for feature in features]
    return build_hierarchy_with_report(
        rows,
        id_field=PRODUCTBOARD_ID_FIELD,
        parent_field=PRODUCTBOARD_PARENT_FIELD,
    )


def build_work_item_hierarchy(
    epics: Iterable[Any],
    features: Iterable[Any],
    stories: Iterable[Any],
) -> HierarchyBuildResult:
    """
    Build an Azure DevOps Epic -> Feature -> User Story tree.

    A feature is nested only under an epic from `epics` and a story only
    under a feature from `features`. The first hierarchy relation that points
    at such a parent wins; with none, the item becomes a root.
    """
    epic_rows = [_entity_fields(item) for item in epics]
    feature_rows = [_entity_fields(item) for item in features]
    story_rows = [_entity_fields(item) for item in stories]

    epic_ids = {row.get("id") for row in epic_rows if _hashable(row.get("id"))}
    feature_ids = {row.get("id") for row in feature_rows if _hashable(row.get("id"))}

    def with_parent(row: Dict[str, Any], work_item_type: str, allowed: Optional[set]) -> Dict[str, Any]:
        parent_id = parent_id_from_relations(row, allowed) if allowed is not None else None
        fields = row.get("fields")
        if not isinstance(fields, Mapping):
            fields = {}
        return {
            **row,
            "parent_id": parent_id,
            "work_item_type": fields.get("System.WorkItemType", work_item_type),
        }

    rows = (
        [with_parent(row, "Epic", None) for row in epic_rows]
        + [with_parent(row, "Feature", epic_ids) for row in feature_rows]
        + [with_parent(row, "User Story", feature_ids) for row in story_rows]
    )
    return build_hierarchy_with_report(rows, id_field="id", parent_field="parent_id")
