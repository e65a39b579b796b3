"""Pitch repository - Database operations for pitches"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Pitch


class PitchRepository:
    """Repository for pitch database operations"""

    @staticmethod
    def get_pitches(db: Session, deal_id: Optional[int] = None, limit: Optional[int] = None) -> list[Pitch]:
        """Get pitches, most recent submission first"""
        query = db.query(Pitch).options(joinedload(Pitch.deal))
        if deal_id:
            query = query.filter(Pitch.deal_id == deal_id)
        query = query.order_by(Pitch.submission_date.desc(), Pitch.id.desc())
        if limit:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def get_pitch_by_id(db: Session, pitch_id: int) -> Optional[Pitch]:
        return db.query(Pitch).filter(Pitch.id == pitch_id).first()

    @staticmethod
    def create_pitch(db: Session, **pitch_data) -> Pitch:
        """Create a new pitch"""
        pitch = Pitch(**pitch_data)
        db.add(pitch)
        db.commit()
        db.refresh(pitch)
        return pitch

    @staticmethod
    def update_pitch(db: Session, pitch: Pitch, **updates) -> Pitch:
        """Update a pitch with provided fields"""
        for key, value in updates.items():
            if value is not None and hasattr(pitch, key):
                setattr(pitch, key, value)

        db.commit()
        db.refresh(pitch)
        return pitch

    @staticmethod
    def delete_pitch(db: Session, pitch: Pitch) -> None:
        db.delete(pitch)
        db.commit()
