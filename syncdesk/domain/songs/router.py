"""Song router - FastAPI endpoints for the song catalog"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ...shared.errors import route_errors
from .schemas import SongCreate, SongResponse, SongUpdate
from .service import SongService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/songs", tags=["Songs"])


def get_song_service(db: Session = Depends(get_db)) -> SongService:
    """Dependency injection for SongService"""
    return SongService(db)


@router.get("", response_model=list[SongResponse])
async def get_songs(
    search: Optional[str] = Query(None),
    genre: Optional[str] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=500),
    service: SongService = Depends(get_song_service),
):
    """Search songs by title, artist or album"""
    with route_errors("fetch songs"):
        return service.get_songs(search, genre, limit)


@router.get("/{song_id}", response_model=SongResponse)
async def get_song(song_id: int, service: SongService = Depends(get_song_service)):
    with route_errors("fetch song"):
        return service.get_song(song_id)


@router.post("", response_model=SongResponse)
async def create_song(data: SongCreate, service: SongService = Depends(get_song_service)):
    with route_errors("create song"):
        return service.create_song(data)


@router.put("/{song_id}", response_model=SongResponse)
@router.patch("/{song_id}", response_model=SongResponse)
async def update_song(song_id: int, data: SongUpdate, service: SongService = Depends(get_song_service)):
    with route_errors("update song"):
        return service.update_song(song_id, data)


@router.delete("/{song_id}")
async def delete_song(song_id: int, service: SongService = Depends(get_song_service)):
    with route_errors("delete song"):
        return service.delete_song(song_id)
