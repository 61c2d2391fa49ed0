"""
Workspace Data Migration API Routes

Export/import snapshot validation.

URL Structure: /api/v1/migration/...

- POST /export           strict: 422 on any schema violation, otherwise the
                         validated snapshot as a JSON download
- POST /validate-import  lenient: always 200 with {valid, errors, data}
"""

import logging

from fastapi import APIRouter, Body, Request
from fastapi.responses import JSONResponse

from plansync.app.models.migration_models import ExportSnapshot, ImportValidationResponse
from plansync.core.exceptions import SchemaError
from plansync.core.services.migration import (
    export_filename,
    validate_export_data,
    validate_import_data,
)
from plansync.core.utils.error_handling import safe_error_response

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "/export",
    response_model=ExportSnapshot,
    summary="Validate an export snapshot",
    description="Validate a snapshot against the export schema and return it as a download"
)
async def export_snapshot(payload: dict = Body(..., description="Snapshot to export")):
    """Validate and return an export snapshot."""
    try:
        snapshot = validate_export_data(payload)
    except SchemaError as e:
        raise safe_error_response(e, operation="snapshot export")

    filename = export_filename()
    logger.info(f"Export snapshot validated: {filename}")
    return JSONResponse(
        content=snapshot.to_json_dict(),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@router.post(
    "/validate-import",
    response_model=ImportValidationResponse,
    response_model_exclude_unset=True,
    summary="Validate an import snapshot",
    description=(
        "Check a snapshot's schema and workspace references before import. "
        "Problems are reported in the response body, never as an error status."
    )
)
async def validate_import(request: Request):
    """Validate an import snapshot; the body may be any JSON text."""
    body = await request.body()
    result = validate_import_data(body)
    return ImportValidationResponse(valid=result.valid, errors=result.errors, data=result.data)
