"""Song domain schemas - Pydantic models for validation"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, field_validator
from pydantic.alias_generators import to_camel

from ...shared.validators import validate_percentage
from ..deals.schemas import ArtistLabelEntry, ComposerPublisherEntry


class SongFields(BaseModel):
    """Every writable song field, all optional"""

    title: Optional[str] = None
    artist: Optional[str] = None
    album: Optional[str] = None
    genre: Optional[str] = None
    mood: Optional[str] = None
    tempo: Optional[int] = None
    duration: Optional[int] = None
    key: Optional[str] = None
    bpm: Optional[int] = None
    lyrics: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[list[str]] = None
    file_path: Optional[str] = None
    composer: Optional[str] = None
    publisher: Optional[str] = None
    label: Optional[str] = None
    publishing_ownership: Optional[Decimal] = None
    master_ownership: Optional[Decimal] = None
    composer_publishers: Optional[list[ComposerPublisherEntry]] = None
    artist_labels: Optional[list[ArtistLabelEntry]] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @field_validator("publishing_ownership", "master_ownership", mode="before")
    @classmethod
    def validate_ownership(cls, v):
        return validate_percentage(v)

    @field_validator("tempo", "duration", "bpm", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return None if v == "" else v


class SongCreate(SongFields):
    """Schema for creating a new song"""

    title: str
    artist: str


class SongUpdate(SongFields):
    """Schema for a partial song update"""


class SongResponse(SongFields):
    """Schema for song response"""

    id: int
    title: str
    artist: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True
