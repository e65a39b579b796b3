"""Pitch router - FastAPI endpoints for pitch operations"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ...models import Pitch
from ...shared.errors import route_errors
from .schemas import PitchCreate, PitchResponse, PitchUpdate
from .service import PitchService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pitches", tags=["Pitches"])


def get_pitch_service(db: Session = Depends(get_db)) -> PitchService:
    """Dependency injection for PitchService"""
    return PitchService(db)


def _to_response(p: Pitch) -> PitchResponse:
    return PitchResponse(
        id=p.id,
        dealId=p.deal_id,
        customDealName=p.custom_deal_name,
        projectName=p.deal.project_name if p.deal else p.custom_deal_name,
        submissionDate=p.submission_date,
        followUpDate=p.follow_up_date,
        status=p.status,
        notes=p.notes,
        createdAt=p.created_at,
    )


@router.get("", response_model=list[PitchResponse])
async def get_pitches(
    dealId: Optional[int] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=500),
    service: PitchService = Depends(get_pitch_service),
):
    with route_errors("fetch pitches"):
        return [_to_response(p) for p in service.get_pitches(dealId, limit)]


@router.get("/{pitch_id}", response_model=PitchResponse)
async def get_pitch(pitch_id: int, service: PitchService = Depends(get_pitch_service)):
    with route_errors("fetch pitch"):
        return _to_response(service.get_pitch(pitch_id))


@router.post("", response_model=PitchResponse)
async def create_pitch(data: PitchCreate, service: PitchService = Depends(get_pitch_service)):
    """Create a pitch against a deal or a custom project name"""
    with route_errors("create pitch"):
        return _to_response(service.create_pitch(data))


@router.put("/{pitch_id}", response_model=PitchResponse)
@router.patch("/{pitch_id}", response_model=PitchResponse)
async def update_pitch(pitch_id: int, data: PitchUpdate, service: PitchService = Depends(get_pitch_service)):
    with route_errors("update pitch"):
        return _to_response(service.update_pitch(pitch_id, data))


@router.delete("/{pitch_id}")
async def delete_pitch(pitch_id: int, service: PitchService = Depends(get_pitch_service)):
    with route_errors("delete pitch"):
        return service.delete_pitch(pitch_id)
