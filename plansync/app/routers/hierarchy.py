"""
Planning Hierarchy API Routes

Endpoints that turn flat entity lists into parent/child forests for the
tree/explorer views.

URL Structure: /api/v1/hierarchy/...

Features:
- Generic build with configurable id/parent fields
- ProductBoard feature trees (raw API payloads or stored rows)
- Azure DevOps Epic -> Feature -> User Story trees
"""

import logging

from fastapi import APIRouter, HTTPException, status

from plansync.app.models.hierarchy_models import (
    BuildHierarchyRequest,
    FeatureHierarchyRequest,
    HierarchyTreeResponse,
    WorkItemHierarchyRequest,
)
from plansync.core.services.hierarchy import (
    HierarchyBuildResult,
    build_feature_hierarchy,
    build_hierarchy_with_report,
    build_work_item_hierarchy,
    forest_to_dicts,
)
from plansync.core.utils.error_handling import safe_error_response

router = APIRouter()
logger = logging.getLogger(__name__)


def _to_response(result: HierarchyBuildResult) -> HierarchyTreeResponse:
    return HierarchyTreeResponse(roots=forest_to_dicts(result.roots), report=result.report)


@router.post(
    "/build",
    response_model=HierarchyTreeResponse,
    summary="Build hierarchy tree",
    description="Build a parent/child forest from a flat list of entities"
)
async def build_tree(request: BuildHierarchyRequest):
    """Build a forest from flat entities."""
    try:
        result = build_hierarchy_with_report(
            request.entities,
            id_field=request.id_field,
            parent_field=request.parent_field,
        )
    except Exception as e:
        raise safe_error_response(e, operation="hierarchy build")
    return _to_response(result)


@router.post(
    "/productboard/features",
    response_model=HierarchyTreeResponse,
    summary="Build ProductBoard feature tree",
    description="Nest ProductBoard features and subfeatures under their parents"
)
async def build_feature_tree(request: FeatureHierarchyRequest):
    """Build a ProductBoard feature forest."""
    try:
        result = build_feature_hierarchy(request.features)
    except TypeError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        raise safe_error_response(e, operation="ProductBoard feature hierarchy build")
    return _to_response(result)


@router.post(
    "/azure-devops/work-items",
    response_model=HierarchyTreeResponse,
    summary="Build Azure DevOps work item tree",
    description="Nest Features under Epics and User Stories under Features using hierarchy relations"
)
async def build_work_item_tree(request: WorkItemHierarchyRequest):
    """Build an Azure DevOps work item forest."""
    try:
        result = build_work_item_hierarchy(request.epics, request.features, request.stories)
    except Exception as e:
        raise safe_error_response(e, operation="Azure DevOps work item hierarchy build")
    return _to_response(result)
