"""Pitch service - Business logic for pitch tracking"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Pitch
from ...utils.sanitization import sanitize_string
from .repository import PitchRepository
from .schemas import PitchCreate, PitchUpdate

logger = logging.getLogger(__name__)


class PitchService:
    """Service layer for pitch business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = PitchRepository()

    def get_pitches(self, deal_id: Optional[int] = None, limit: Optional[int] = None) -> list[Pitch]:
        return self.repo.get_pitches(self.db, deal_id, limit)

    def get_pitch(self, pitch_id: int) -> Pitch:
        """Get a specific pitch"""
        pitch = self.repo.get_pitch_by_id(self.db, pitch_id)
        if not pitch:
            raise HTTPException(status_code=404, detail="Pitch not found")
        return pitch

    def create_pitch(self, data: PitchCreate) -> Pitch:
        """Create a pitch; the submission date is set by the server"""
        if not data.dealId and not data.customDealName:
            raise HTTPException(status_code=400, detail="Either dealId or customDealName is required")

        logger.info(f"📥 Creating pitch for {'deal ' + str(data.dealId) if data.dealId else data.customDealName}")
        return self.repo.create_pitch(
            self.db,
            deal_id=data.dealId,
            custom_deal_name=data.customDealName or None,
            status=data.status or "pending",
            notes=sanitize_string(data.notes) or "",
            follow_up_date=data.followUpDate,
        )

    def update_pitch(self, pitch_id: int, data: PitchUpdate) -> Pitch:
        """Update a pitch"""
        pitch = self.get_pitch(pitch_id)

        updates = {}
        if data.dealId is not None:
            updates["deal_id"] = data.dealId
        if data.customDealName is not None:
            updates["custom_deal_name"] = data.customDealName
        if data.status is not None:
            updates["status"] = data.status
        if data.notes is not None:
            updates["notes"] = sanitize_string(data.notes)
        if data.followUpDate is not None:
            updates["follow_up_date"] = data.followUpDate

        return self.repo.update_pitch(self.db, pitch, **updates)

    def delete_pitch(self, pitch_id: int) -> dict:
        pitch = self.get_pitch(pitch_id)
        self.repo.delete_pitch(self.db, pitch)
        return {"success": True}
