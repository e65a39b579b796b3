"""Song service - Business logic for the song catalog"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Song
from ...utils.sanitization import sanitize_fields
from .repository import SongRepository
from .schemas import SongCreate, SongUpdate

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50


class SongService:
    """Service layer for song business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = SongRepository()

    def get_songs(self, search: Optional[str] = None, genre: Optional[str] = None, limit: Optional[int] = None) -> list[Song]:
        return self.repo.get_songs(self.db, search, genre, limit or DEFAULT_LIMIT)

    def get_song(self, song_id: int) -> Song:
        """Get a specific song"""
        song = self.repo.get_song_by_id(self.db, song_id)
        if not song:
            raise HTTPException(status_code=404, detail="Song not found")
        return song

    def _values(self, data, exclude_unset: bool) -> dict:
        values = data.model_dump(exclude_unset=exclude_unset, exclude_none=True)
        # Ownership lists are stored whole so every entry keeps all its keys
        if data.composer_publishers is not None:
            values["composer_publishers"] = [e.model_dump() for e in data.composer_publishers]
        if data.artist_labels is not None:
            values["artist_labels"] = [e.model_dump() for e in data.artist_labels]
        return sanitize_fields(values, ("description",))

    def create_song(self, data: SongCreate) -> Song:
        logger.info(f"📥 Creating song: {data.title} by {data.artist}")
        return self.repo.create_song(self.db, **self._values(data, exclude_unset=False))

    def update_song(self, song_id: int, data: SongUpdate) -> Song:
        """Update a song; existing deals keep their own ownership snapshots"""
        song = self.get_song(song_id)
        return self.repo.update_song(self.db, song, **self._values(data, exclude_unset=True))

    def delete_song(self, song_id: int) -> dict:
        song = self.get_song(song_id)
        self.repo.delete_song(self.db, song)
        return {"success": True}
