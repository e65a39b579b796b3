"""Song repository - Database operations for songs"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...models import Song


class SongRepository:
    """Repository for song database operations"""

    @staticmethod
    def get_songs(db: Session, search: Optional[str] = None, genre: Optional[str] = None, limit: int = 50) -> list[Song]:
        """Search the catalog by title, artist or album, newest first"""
        query = db.query(Song)

        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(Song.title.ilike(pattern), Song.artist.ilike(pattern), Song.album.ilike(pattern))
            )
        if genre:
            query = query.filter(Song.genre == genre)

        return query.order_by(Song.created_at.desc(), Song.id.desc()).limit(limit).all()

    @staticmethod
    def get_song_by_id(db: Session, song_id: int) -> Optional[Song]:
        return db.query(Song).filter(Song.id == song_id).first()

    @staticmethod
    def create_song(db: Session, **song_data) -> Song:
        """Create a new song"""
        song = Song(**song_data)
        db.add(song)
        db.commit()
        db.refresh(song)
        return song

    @staticmethod
    def update_song(db: Session, song: Song, **updates) -> Song:
        """Update a song with provided fields"""
        for key, value in updates.items():
            if value is not None and hasattr(song, key):
                setattr(song, key, value)

        db.commit()
        db.refresh(song)
        return song

    @staticmethod
    def delete_song(db: Session, song: Song) -> None:
        db.delete(song)
        db.commit()
