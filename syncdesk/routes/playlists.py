import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import Playlist, PlaylistSong, Song
from ..shared.errors import route_errors
from ..utils.sanitization import sanitize_string

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/playlists", tags=["Playlists"])
playlist_songs_router = APIRouter(prefix="/playlist-songs", tags=["Playlists"])


class PlaylistCreate(BaseModel):
    name: str
    description: Optional[str] = None
    isPublic: bool = False


class PlaylistUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    isPublic: Optional[bool] = None


class PlaylistResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    isPublic: bool
    songCount: int
    createdAt: Optional[datetime] = None


class PlaylistSongAdd(BaseModel):
    songId: int
    position: Optional[int] = None


class PlaylistSongResponse(BaseModel):
    id: int
    playlistId: int
    songId: int
    position: int
    title: Optional[str] = None
    artist: Optional[str] = None
    addedAt: Optional[datetime] = None


def _playlist_response(p: Playlist) -> PlaylistResponse:
    return PlaylistResponse(
        id=p.id,
        name=p.name,
        description=p.description,
        isPublic=bool(p.is_public),
        songCount=len(p.songs),
        createdAt=p.created_at,
    )


def _get_playlist(db: Session, playlist_id: int) -> Playlist:
    playlist = db.query(Playlist).filter(Playlist.id == playlist_id).first()
    if not playlist:
        raise HTTPException(status_code=404, detail="Playlist not found")
    return playlist


def _playlist_songs(db: Session, playlist_id: int) -> list[PlaylistSongResponse]:
    rows = (
        db.query(PlaylistSong, Song)
        .outerjoin(Song, Song.id == PlaylistSong.song_id)
        .filter(PlaylistSong.playlist_id == playlist_id)
        .order_by(PlaylistSong.position.asc(), PlaylistSong.id.asc())
        .all()
    )
    return [
        PlaylistSongResponse(
            id=entry.id,
            playlistId=entry.playlist_id,
            songId=entry.song_id,
            position=entry.position or 0,
            title=song.title if song else None,
            artist=song.artist if song else None,
            addedAt=entry.added_at,
        )
        for entry, song in rows
    ]


@router.get("", response_model=list[PlaylistResponse])
async def get_playlists(db: Session = Depends(get_db)):
    with route_errors("fetch playlists"):
        playlists = db.query(Playlist).order_by(Playlist.created_at.desc(), Playlist.id.desc()).all()
        return [_playlist_response(p) for p in playlists]


@router.get("/{playlist_id}", response_model=PlaylistResponse)
async def get_playlist(playlist_id: int, db: Session = Depends(get_db)):
    with route_errors("fetch playlist"):
        return _playlist_response(_get_playlist(db, playlist_id))


@router.post("", response_model=PlaylistResponse, status_code=201)
async def create_playlist(data: PlaylistCreate, db: Session = Depends(get_db)):
    with route_errors("create playlist"):
        playlist = Playlist(name=data.name, description=sanitize_string(data.description), is_public=data.isPublic)
        db.add(playlist)
        db.commit()
        db.refresh(playlist)
        return _playlist_response(playlist)


@router.put("/{playlist_id}", response_model=PlaylistResponse)
@router.patch("/{playlist_id}", response_model=PlaylistResponse)
async def update_playlist(playlist_id: int, data: PlaylistUpdate, db: Session = Depends(get_db)):
    with route_errors("update playlist"):
        playlist = _get_playlist(db, playlist_id)
        if data.name is not None:
            playlist.name = data.name
        if data.description is not None:
            playlist.description = sanitize_string(data.description)
        if data.isPublic is not None:
            playlist.is_public = data.isPublic
        db.commit()
        db.refresh(playlist)
        return _playlist_response(playlist)


@router.delete("/{playlist_id}")
async def delete_playlist(playlist_id: int, db: Session = Depends(get_db)):
    with route_errors("delete playlist"):
        db.delete(_get_playlist(db, playlist_id))
        db.commit()
        return {"success": True}


@router.post("/{playlist_id}/songs", response_model=PlaylistSongResponse, status_code=201)
async def add_playlist_song(playlist_id: int, data: PlaylistSongAdd, db: Session = Depends(get_db)):
    """Append a song (or insert it at an explicit position)"""
    with route_errors("add song to playlist"):
        _get_playlist(db, playlist_id)
        if not db.query(Song).filter(Song.id == data.songId).first():
            raise HTTPException(status_code=404, detail="Song not found")

        position = data.position
        if position is None:
            last = db.query(func.max(PlaylistSong.position)).filter(PlaylistSong.playlist_id == playlist_id).scalar()
            position = (last + 1) if last is not None else 0

        entry = PlaylistSong(playlist_id=playlist_id, song_id=data.songId, position=position)
        db.add(entry)
        db.commit()
        return next(s for s in _playlist_songs(db, playlist_id) if s.id == entry.id)


@router.delete("/{playlist_id}/songs/{song_id}")
async def remove_playlist_song(playlist_id: int, song_id: int, db: Session = Depends(get_db)):
    with route_errors("remove song from playlist"):
        removed = (
            db.query(PlaylistSong)
            .filter(PlaylistSong.playlist_id == playlist_id, PlaylistSong.song_id == song_id)
            .delete(synchronize_session=False)
        )
        db.commit()
        if not removed:
            raise HTTPException(status_code=404, detail="Song not in playlist")
        return {"success": True}


@playlist_songs_router.get("/{playlist_id}", response_model=list[PlaylistSongResponse])
async def get_playlist_songs(playlist_id: int, db: Session = Depends(get_db)):
    """Songs of a playlist in play order"""
    with route_errors("fetch playlist songs"):
        return _playlist_songs(db, playlist_id)
