"""Calendar router - FastAPI endpoints for calendar events"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ...database import get_db
from ...models import CalendarEvent
from ...shared.errors import route_errors
from .schemas import CalendarEventCreate, CalendarEventResponse, CalendarEventUpdate
from .service import CalendarService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/calendar-events", tags=["Calendar"])


def get_calendar_service(db: Session = Depends(get_db)) -> CalendarService:
    """Dependency injection for CalendarService"""
    return CalendarService(db)


def _to_response(e: CalendarEvent) -> CalendarEventResponse:
    return CalendarEventResponse(
        id=e.id,
        title=e.title,
        description=e.description,
        startDate=e.start_date,
        endDate=e.end_date,
        allDay=bool(e.all_day),
        entityType=e.entity_type,
        entityId=e.entity_id,
        reminderMinutes=e.reminder_minutes,
        status=e.status,
        createdAt=e.created_at,
    )


@router.get("", response_model=list[CalendarEventResponse])
async def get_events(
    entityType: Optional[str] = Query(None),
    entityId: Optional[int] = Query(None),
    startDate: Optional[datetime] = Query(None),
    endDate: Optional[datetime] = Query(None),
    service: CalendarService = Depends(get_calendar_service),
):
    with route_errors("fetch calendar events"):
        return [_to_response(e) for e in service.get_events(entityType, entityId, startDate, endDate)]


@router.get("/{event_id}", response_model=CalendarEventResponse)
async def get_event(event_id: int, service: CalendarService = Depends(get_calendar_service)):
    with route_errors("fetch calendar event"):
        return _to_response(service.get_event(event_id))


@router.post("", response_model=CalendarEventResponse, status_code=201)
async def create_event(data: CalendarEventCreate, service: CalendarService = Depends(get_calendar_service)):
    with route_errors("create calendar event"):
        return _to_response(service.create_event(data))


@router.put("/{event_id}", response_model=CalendarEventResponse)
@router.patch("/{event_id}", response_model=CalendarEventResponse)
async def update_event(
    event_id: int,
    data: CalendarEventUpdate,
    service: CalendarService = Depends(get_calendar_service),
):
    """Update an event; air-date events keep their deal in step"""
    with route_errors("update calendar event"):
        return _to_response(service.update_event(event_id, data))


@router.delete("/{event_id}", status_code=204)
async def delete_event(event_id: int, service: CalendarService = Depends(get_calendar_service)):
    with route_errors("delete calendar event"):
        service.delete_event(event_id)
    return Response(status_code=204)
