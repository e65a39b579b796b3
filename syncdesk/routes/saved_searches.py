import logging
from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import SavedSearch
from ..shared.errors import route_errors

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/saved-searches", tags=["Saved Searches"])

SEARCHABLE_ENTITIES = ("songs", "deals", "contacts", "pitches", "payments")


class SavedSearchCreate(BaseModel):
    name: str
    entityType: str
    query: dict[str, Any] = {}

    @field_validator("entityType")
    @classmethod
    def validate_entity_type(cls, v):
        v = v.strip().lower()
        if v not in SEARCHABLE_ENTITIES:
            raise ValueError(f"Invalid entityType '{v}'. Expected one of: {', '.join(SEARCHABLE_ENTITIES)}")
        return v


class SavedSearchResponse(BaseModel):
    id: int
    name: str
    entityType: str
    query: dict[str, Any]
    createdAt: Optional[datetime] = None


def _to_response(s: SavedSearch) -> SavedSearchResponse:
    return SavedSearchResponse(
        id=s.id,
        name=s.name,
        entityType=s.entity_type,
        query=s.query or {},
        createdAt=s.created_at,
    )


@router.get("", response_model=list[SavedSearchResponse])
async def get_saved_searches(entityType: Optional[str] = Query(None), db: Session = Depends(get_db)):
    with route_errors("fetch saved searches"):
        query = db.query(SavedSearch)
        if entityType:
            query = query.filter(SavedSearch.entity_type == entityType)
        return [_to_response(s) for s in query.order_by(SavedSearch.name.asc()).all()]


@router.post("", response_model=SavedSearchResponse, status_code=201)
async def create_saved_search(data: SavedSearchCreate, db: Session = Depends(get_db)):
    with route_errors("create saved search"):
        search = SavedSearch(name=data.name, entity_type=data.entityType, query=data.query)
        db.add(search)
        db.commit()
        db.refresh(search)
        return _to_response(search)


@router.delete("/{search_id}")
async def delete_saved_search(search_id: int, db: Session = Depends(get_db)):
    with route_errors("delete saved search"):
        search = db.query(SavedSearch).filter(SavedSearch.id == search_id).first()
        if not search:
            raise HTTPException(status_code=404, detail="Saved search not found")
        db.delete(search)
        db.commit()
        return {"success": True}
