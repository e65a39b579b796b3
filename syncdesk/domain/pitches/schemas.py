"""Pitch domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

PITCH_STATUSES = ("pending", "responded", "no_response")


def _validate_status(v):
    if v is None:
        return v
    status = str(v).strip().lower().replace(" ", "_")
    if status not in PITCH_STATUSES:
        raise ValueError(f"Invalid status '{v}'. Expected one of: {', '.join(PITCH_STATUSES)}")
    return status


class PitchCreate(BaseModel):
    """Schema for creating a pitch, against a deal or a free-form project name"""

    dealId: Optional[int] = None
    customDealName: Optional[str] = None
    status: Optional[str] = None
    notes: Optional[str] = None
    followUpDate: Optional[datetime] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return _validate_status(v)

    @field_validator("dealId", "followUpDate", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return v or None


class PitchUpdate(BaseModel):
    """Schema for updating an existing pitch"""

    dealId: Optional[int] = None
    customDealName: Optional[str] = None
    status: Optional[str] = None
    notes: Optional[str] = None
    followUpDate: Optional[datetime] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return _validate_status(v)


class PitchResponse(BaseModel):
    """Schema for pitch response"""

    id: int
    dealId: Optional[int] = None
    customDealName: Optional[str] = None
    projectName: Optional[str] = None
    submissionDate: Optional[datetime] = None
    followUpDate: Optional[datetime] = None
    status: str
    notes: Optional[str] = None
    createdAt: Optional[datetime] = None
