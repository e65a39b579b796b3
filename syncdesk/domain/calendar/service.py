"""Calendar service - Business logic for calendar events"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import CalendarEvent
from ...utils.sanitization import sanitize_string
from .repository import CalendarRepository
from .schemas import CalendarEventCreate, CalendarEventUpdate

logger = logging.getLogger(__name__)

AIR_DATE_MARKER = "Air Date:"


class CalendarService:
    """Service layer for calendar event business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CalendarRepository()

    def get_events(
        self,
        entity_type: Optional[str] = None,
        entity_id: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[CalendarEvent]:
        return self.repo.get_events(self.db, entity_type, entity_id, start, end)

    def get_event(self, event_id: int) -> CalendarEvent:
        """Get a specific calendar event"""
        event = self.repo.get_event_by_id(self.db, event_id)
        if not event:
            raise HTTPException(status_code=404, detail="Calendar event not found")
        return event

    def create_event(self, data: CalendarEventCreate) -> CalendarEvent:
        return self.repo.create_event(
            self.db,
            title=data.title,
            description=sanitize_string(data.description),
            start_date=data.startDate,
            end_date=data.endDate,
            all_day=data.allDay,
            entity_type=data.entityType,
            entity_id=data.entityId,
            reminder_minutes=data.reminderMinutes,
            status=data.status,
        )

    def update_event(self, event_id: int, data: CalendarEventUpdate) -> CalendarEvent:
        """Update an event; moving a deal's air-date event moves the deal's air date"""
        event = self.get_event(event_id)

        updates = {}
        if data.title is not None:
            updates["title"] = data.title
        if data.description is not None:
            updates["description"] = sanitize_string(data.description)
        if data.startDate is not None:
            updates["start_date"] = data.startDate
        if data.endDate is not None:
            updates["end_date"] = data.endDate
        if data.allDay is not None:
            updates["all_day"] = data.allDay
        if data.entityType is not None:
            updates["entity_type"] = data.entityType
        if data.entityId is not None:
            updates["entity_id"] = data.entityId
        if data.reminderMinutes is not None:
            updates["reminder_minutes"] = data.reminderMinutes
        if data.status is not None:
            updates["status"] = data.status

        event = self.repo.update_event(self.db, event, **updates)

        if event.entity_type == "deal" and event.entity_id and AIR_DATE_MARKER in event.title:
            self._sync_deal_air_date(event)

        return event

    def _sync_deal_air_date(self, event: CalendarEvent) -> None:
        # A failed sync never fails the calendar update
        try:
            deal = self.repo.get_deal(self.db, event.entity_id)
            if deal is None:
                logger.warning(f"⚠️ Air date event {event.id} points at missing deal {event.entity_id}")
                return
            deal.air_date = event.start_date.date()
            self.db.commit()
            logger.info(f"📅 Deal {deal.id} air date moved to {deal.air_date}")
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error updating deal air date from event {event.id}: {e}")

    def delete_event(self, event_id: int) -> None:
        event = self.get_event(event_id)
        self.repo.delete_event(self.db, event)
