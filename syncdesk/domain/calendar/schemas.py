"""Calendar event schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

EVENT_STATUSES = ("scheduled", "completed", "cancelled")
ENTITY_TYPES = ("deal", "pitch", "payment")


def _validate_choice(value, choices, label):
    if value is None:
        return value
    value = str(value).strip().lower()
    if value not in choices:
        raise ValueError(f"Invalid {label} '{value}'. Expected one of: {', '.join(choices)}")
    return value


class CalendarEventCreate(BaseModel):
    """Schema for creating a calendar event"""

    title: str
    description: Optional[str] = None
    startDate: datetime
    endDate: Optional[datetime] = None
    allDay: bool = False
    entityType: str
    entityId: int
    reminderMinutes: Optional[int] = 60
    status: str = "scheduled"

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return _validate_choice(v, EVENT_STATUSES, "status")

    @field_validator("entityType")
    @classmethod
    def validate_entity_type(cls, v):
        return _validate_choice(v, ENTITY_TYPES, "entityType")

    @field_validator("endDate", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return v or None


class CalendarEventUpdate(BaseModel):
    """Schema for updating a calendar event"""

    title: Optional[str] = None
    description: Optional[str] = None
    startDate: Optional[datetime] = None
    endDate: Optional[datetime] = None
    allDay: Optional[bool] = None
    entityType: Optional[str] = None
    entityId: Optional[int] = None
    reminderMinutes: Optional[int] = None
    status: Optional[str] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return _validate_choice(v, EVENT_STATUSES, "status")

    @field_validator("entityType")
    @classmethod
    def validate_entity_type(cls, v):
        return _validate_choice(v, ENTITY_TYPES, "entityType")


class CalendarEventResponse(BaseModel):
    """Schema for calendar event response"""

    id: int
    title: str
    description: Optional[str] = None
    startDate: datetime
    endDate: Optional[datetime] = None
    allDay: bool
    entityType: str
    entityId: int
    reminderMinutes: Optional[int] = None
    status: str
    createdAt: Optional[datetime] = None
