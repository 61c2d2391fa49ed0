"""
Planning Hierarchy Service

Builds parent/child forests from flat ProductBoard and Azure DevOps entities.

Usage:
    from plansync.core.services.hierarchy import build_hierarchy

    roots = build_hierarchy(features, id_field="id", parent_field="parent_id")
"""

from plansync.core.services.hierarchy.builder import (
    HierarchyBuildResult,
    build_feature_hierarchy,
    build_hierarchy,
    build_hierarchy_with_report,
    build_work_item_hierarchy,
)
from plansync.core.services.hierarchy.parents import (
    extract_parent_ref,
    normalize_productboard_feature,
    parent_id_from_relations,
    unwrap_data,
)
from plansync.core.services.hierarchy.structure import (
    count_nodes,
    detect_cycles,
    find_node,
    forest_to_dicts,
    iter_nodes,
    max_depth,
)

__all__ = [
    "HierarchyBuildResult",
    "build_hierarchy",
    "build_hierarchy_with_report",
    "build_feature_hierarchy",
    "build_work_item_hierarchy",
    "extract_parent_ref",
    "normalize_productboard_feature",
    "parent_id_from_relations",
    "unwrap_data",
    "count_nodes",
    "detect_cycles",
    "find_node",
    "forest_to_dicts",
    "iter_nodes",
    "max_depth",
]
