"""Calendar repository - Database operations for calendar events"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...models import CalendarEvent, Deal


class CalendarRepository:
    """Repository for calendar event database operations"""

    @staticmethod
    def get_events(
        db: Session,
        entity_type: Optional[str] = None,
        entity_id: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[CalendarEvent]:
        """Get events in chronological order, optionally within a window"""
        query = db.query(CalendarEvent)
        if entity_type:
            query = query.filter(CalendarEvent.entity_type == entity_type)
        if entity_id:
            query = query.filter(CalendarEvent.entity_id == entity_id)
        if start:
            query = query.filter(CalendarEvent.start_date >= start)
        if end:
            query = query.filter(CalendarEvent.start_date <= end)
        return query.order_by(CalendarEvent.start_date.asc()).all()

    @staticmethod
    def get_event_by_id(db: Session, event_id: int) -> Optional[CalendarEvent]:
        return db.query(CalendarEvent).filter(CalendarEvent.id == event_id).first()

    @staticmethod
    def create_event(db: Session, **event_data) -> CalendarEvent:
        event = CalendarEvent(**event_data)
        db.add(event)
        db.commit()
        db.refresh(event)
        return event

    @staticmethod
    def update_event(db: Session, event: CalendarEvent, **updates) -> CalendarEvent:
        """Update an event with provided fields"""
        for key, value in updates.items():
            if value is not None and hasattr(event, key):
                setattr(event, key, value)

        db.commit()
        db.refresh(event)
        return event

    @staticmethod
    def delete_event(db: Session, event: CalendarEvent) -> None:
        db.delete(event)
        db.commit()

    @staticmethod
    def get_deal(db: Session, deal_id: int) -> Optional[Deal]:
        return db.query(Deal).filter(Deal.id == deal_id).first()
