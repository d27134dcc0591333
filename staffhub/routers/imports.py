"""
Bulk import routes for StaffHub.

POST /api/import?type=<family>           JSON payload, one transaction
POST /api/import/workbook?type=<family>  .xlsx upload, same pipeline
GET  /api/import/types                   registered families
GET  /api/import/history                 recent runs
"""

import logging
from typing import Any, List

from fastapi import APIRouter, Body, Depends, File, Header, HTTPException, Query, UploadFile
from sqlalchemy.orm import Session

from staffhub.database import get_db
from staffhub.models import ImportHistory
from staffhub.schemas.imports import (
    ImportHistoryResponse,
    ImportResponse,
    ImportStatsSchema,
    ImportTypesResponse,
)
from staffhub.services.credentials import CredentialConfigError, CredentialService
from staffhub.services.imports import (
    SHEET_NAMES,
    ImportAuthorizationError,
    ImportOrchestrator,
    ImportOutcome,
    ImportRunError,
    UnknownImportTypeError,
    WorkbookError,
    available_import_types,
    get_import_orchestrator,
    read_workbook,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/import", tags=["import"])


def _orchestrator(db: Session = Depends(get_db)) -> ImportOrchestrator:
    return get_import_orchestrator(db)


def _execute(
    orchestrator: ImportOrchestrator,
    authorization: str | None,
    import_type: str,
    payload: dict[str, Any],
    original_filename: str | None = None,
) -> ImportOutcome:
    """Run an import and map engine errors onto HTTP statuses."""
    token = CredentialService.bearer_token(authorization)
    try:
        return orchestrator.run(token, import_type, payload, original_filename)
    except ImportAuthorizationError as e:
        raise HTTPException(status_code=403 if e.authenticated else 401, detail=str(e))
    except UnknownImportTypeError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ImportRunError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except CredentialConfigError as e:
        logger.error(f"Import refused, credentials not configured: {e}")
        raise HTTPException(status_code=500, detail=str(e))


def _response(outcome: ImportOutcome) -> ImportResponse:
    return ImportResponse(
        message=outcome.message,
        warnings=outcome.warnings,
        stats=ImportStatsSchema(**outcome.stats.as_dict()),
        import_type=outcome.import_type,
    )


@router.post("", response_model=ImportResponse)
def run_import(
    import_type: str = Query(..., alias="type", description="Import family, e.g. core_entities"),
    payload: dict[str, Any] = Body(default={}),
    authorization: str | None = Header(None),
    orchestrator: ImportOrchestrator = Depends(_orchestrator),
):
    """
    Run one import from a JSON payload.

    The payload maps sheet names to lists of records. The whole run is one
    transaction: either every accepted row is written or none is.
    """
    outcome = _execute(orchestrator, authorization, import_type, payload)
    return _response(outcome)


@router.post("/workbook", response_model=ImportResponse)
async def run_workbook_import(
    import_type: str = Query(..., alias="type"),
    file: UploadFile = File(..., description="Import workbook (.xlsx)"),
    authorization: str | None = Header(None),
    orchestrator: ImportOrchestrator = Depends(_orchestrator),
):
    """
    Run one import from an uploaded workbook.

    Sheets are matched to payload keys by name (see GET /api/import/types).
    """
    if not file.filename or not file.filename.lower().endswith(".xlsx"):
        raise HTTPException(status_code=400, detail="Invalid file type. Please upload an .xlsx workbook.")

    content = await file.read()
    try:
        payload = read_workbook(content, import_type)
    except UnknownImportTypeError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except WorkbookError as e:
        raise HTTPException(status_code=400, detail=str(e))

    outcome = _execute(orchestrator, authorization, import_type, payload, file.filename)
    return _response(outcome)


@router.get("/types", response_model=ImportTypesResponse)
def list_import_types():
    """List registered import families and the workbook sheets each reads."""
    return ImportTypesResponse(types=available_import_types(), sheets=SHEET_NAMES)


@router.get("/history", response_model=List[ImportHistoryResponse])
def list_import_history(
    limit: int = Query(50, ge=1, le=500),
    authorization: str | None = Header(None),
    orchestrator: ImportOrchestrator = Depends(_orchestrator),
):
    """Most recent import runs, newest first. Requires an operational role."""
    try:
        orchestrator.authenticate(CredentialService.bearer_token(authorization))
    except ImportAuthorizationError as e:
        raise HTTPException(status_code=403 if e.authenticated else 401, detail=str(e))
    except CredentialConfigError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return (
        orchestrator.db.query(ImportHistory)
        .order_by(ImportHistory.imported_at.desc())
        .limit(limit)
        .all()
    )
