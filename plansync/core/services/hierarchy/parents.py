"""
Parent reference extraction for ProductBoard and Azure DevOps payloads.

ProductBoard nests the parent under a key naming its type:

    {"parent": {"feature": {"id": "..."}}}
    {"parent": {"component": {"id": "...", "links": {...}}}}

and list/detail responses wrap records under `data` inconsistently.
Azure DevOps links a work item to its parent through a relation:

    {"rel": "System.LinkTypes.Hierarchy-Reverse",
     "url": "https://dev.azure.com/org/_apis/wit/workItems/42"}
"""

import logging
from typing import Any, Container, Dict, Mapping, Optional

from plansync.app.models.hierarchy_models import ParentKind, ParentRef

logger = logging.getLogger(__name__)

# Checked in this order; the first key present wins.
PARENT_KINDS = (
    ParentKind.FEATURE,
    ParentKind.COMPONENT,
    ParentKind.INITIATIVE,
    ParentKind.PRODUCT,
)

ADO_PARENT_RELATION = "System.LinkTypes.Hierarchy-Reverse"


def unwrap_data(payload: Any) -> Any:
    """Strip a single `{"data": ...}` envelope if present."""
    # {"data": ..., "links": {...}} is the ProductBoard envelope shape
    if isinstance(payload, Mapping) and "data" in payload and set(payload) <= {"data", "links"}:
        return payload["data"]
    return payload


def extract_parent_ref(parent: Any) -> Optional[ParentRef]:
    """
    Resolve a ProductBoard `parent` object into a typed reference.

    Returns None when there is no parent or no usable id.
    """
    if not isinstance(parent, Mapping):
        return None

    for kind in PARENT_KINDS:
        nested = parent.get(kind.value)
        if isinstance(nested, Mapping):
            nested_id = nested.get("id")
            if nested_id:
                return ParentRef(kind=kind, id=str(nested_id))
            return None

    bare_id = parent.get("id")
    if bare_id:
        return ParentRef(kind=ParentKind.UNKNOWN, id=str(bare_id))
    return None


def normalize_productboard_feature(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Flatten a ProductBoard feature payload into a feature row.

    Rows that are already flat (they carry `productboard_id`) are returned
    as a shallow copy.
    """
    record = unwrap_data(raw)
    if not isinstance(record, Mapping):
        raise TypeError(f"ProductBoard feature must be an object, got {type(record).__name__}")

    if "productboard_id" in record:
        return dict(record)

    parent_ref = extract_parent_ref(record.get("parent"))
    status = record.get("status") or {}
    timeframe = record.get("timeframe") or {}
    owner = record.get("owner") or {}

    return {
        "productboard_id": record.get("id"),
        "name": record.get("name"),
        "description": record.get("description"),
        "feature_type": record.get("type"),
        "parent_productboard_id": parent_ref.id if parent_ref else None,
        "parent_type": parent_ref.kind.value if parent_ref else None,
        "status_id": status.get("id"),
        "status_name": status.get("name"),
        "owner_email": owner.get("email"),
        "is_archived": bool(record.get("archived", False)),
        "timeframe_start_date": timeframe.get("startDate"),
        "timeframe_end_date": timeframe.get("endDate"),
        "timeframe_granularity": timeframe.get("granularity"),
        "created_at_timestamp": record.get("createdAt"),
        "updated_at_timestamp": record.get("updatedAt"),
    }


def parent_id_from_relations(
    work_item: Mapping[str, Any],
    allowed: Optional[Container[int]] = None,
) -> Optional[int]:
    """
    Return the parent work item id from an Azure DevOps work item's relations.

    The id is the last path segment of a hierarchy-reverse relation url,
    parsed as an int. Relations are tried in order; with `allowed`, the
    first one whose id is in `allowed` wins.
    """
    relations = work_item.get("relations")
    if not isinstance(relations, (list, tuple)):
        return None
    for relation in relations:
        if not isinstance(relation, Mapping) or relation.get("rel") != ADO_PARENT_RELATION:
            continue
        url = relation.get("url")
        if not isinstance(url, str):
            continue
        segment = url.rstrip("/").rsplit("/", 1)[-1]
        try:
            parent_id = int(segment)
        except ValueError:
            logger.debug(f"Ignoring hierarchy relation with non-numeric target: {url}")
            continue
        if allowed is None or parent_id in allowed:
            return parent_id
    return None
