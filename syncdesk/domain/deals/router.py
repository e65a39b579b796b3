"""Deal router - FastAPI endpoints for deal operations"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from fastapi.responses import Response
from sqlalchemy.orm import Session

from ...config import get_server_settings
from ...database import get_db
from ...shared.errors import route_errors
from .importer import DealImporter, parse_spreadsheet
from .schemas import (
    DealCreate,
    DealImportPreview,
    DealImportRequest,
    DealImportResult,
    DealResponse,
    DealUpdate,
    IncomeReport,
    IncomeShareUpdate,
)
from .service import DealService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/deals", tags=["Deals"])
income_router = APIRouter(prefix="/income", tags=["Deals"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def get_deal_service(db: Session = Depends(get_db)) -> DealService:
    """Dependency injection for DealService"""
    return DealService(db)


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("", response_model=list[DealResponse])
async def get_deals(
    status: Optional[str] = Query(None),
    songId: Optional[int] = Query(None),
    contactId: Optional[int] = Query(None),
    search: Optional[str] = Query(None),
    service: DealService = Depends(get_deal_service),
):
    """List deals with their song and contact"""
    with route_errors("fetch deals"):
        return service.get_deals(status, songId, contactId, search)


@income_router.get("", response_model=IncomeReport)
@router.get("/income", response_model=IncomeReport)
async def get_income_report(
    report: Optional[str] = Query(None, description="pending, writers or artists"),
    service: DealService = Depends(get_deal_service),
):
    """Publishing and recording income rows for every isMine ownership entry"""
    with route_errors("build income report"):
        return service.get_income_report(report)


@income_router.get("/export")
@router.get("/income/export")
async def export_income_report(
    report: str = Query("pending", description="pending, writers or artists"),
    service: DealService = Depends(get_deal_service),
):
    """Download one income report view as an .xlsx workbook"""
    with route_errors("export income report"):
        filename, contents = service.export_income_report(report)
    return Response(
        content=contents,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{deal_id}", response_model=DealResponse)
async def get_deal(deal_id: int, service: DealService = Depends(get_deal_service)):
    with route_errors("fetch deal"):
        return service.get_deal(deal_id)


@router.post("", response_model=DealResponse)
async def create_deal(data: DealCreate, service: DealService = Depends(get_deal_service)):
    """Create a deal, snapshotting the song's ownership and stamping its status date"""
    with route_errors("create deal"):
        return service.create_deal(data)


@router.put("/{deal_id}", response_model=DealResponse)
@router.patch("/{deal_id}", response_model=DealResponse)
async def update_deal(deal_id: int, data: DealUpdate, service: DealService = Depends(get_deal_service)):
    """Partial update; a status change stamps its date if still empty"""
    with route_errors("update deal"):
        return service.update_deal(deal_id, data)


@router.delete("/{deal_id}")
async def delete_deal(deal_id: int, service: DealService = Depends(get_deal_service)):
    with route_errors("delete deal"):
        return service.delete_deal(deal_id)


# ============================================================================
# OWNERSHIP SNAPSHOTS & INCOME
# ============================================================================


@router.post("/{deal_id}/reload-splits", response_model=DealResponse)
async def reload_splits(deal_id: int, service: DealService = Depends(get_deal_service)):
    """Re-copy ownership lists from the linked song and recompute both fee chains"""
    with route_errors("reload splits"):
        return service.reload_splits(deal_id)


@router.put("/{deal_id}/income-shares", response_model=DealResponse)
async def update_income_share(
    deal_id: int,
    data: IncomeShareUpdate,
    service: DealService = Depends(get_deal_service),
):
    """Record the tracked amount and payment date for one ownership entry"""
    with route_errors("update income share"):
        return service.update_income_share(deal_id, data)


# ============================================================================
# SPREADSHEET IMPORT
# ============================================================================


@router.post("/import/parse", response_model=DealImportPreview)
async def parse_import_file(file: UploadFile = File(...)):
    """Read an .xlsx or .csv upload and return its headers, rows and a preview"""
    content = await file.read()
    if len(content) > get_server_settings().max_upload_bytes:
        raise HTTPException(status_code=400, detail="File too large")

    with route_errors("parse file"):
        return parse_spreadsheet(file.filename, content)


@router.post("/import/create", response_model=DealImportResult)
async def create_imported_deals(data: DealImportRequest, db: Session = Depends(get_db)):
    """Create one deal per mapped row and report a per-row tally"""
    with route_errors("import deals"):
        return DealImporter(db).run(data)
