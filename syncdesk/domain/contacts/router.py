"""Contact router - FastAPI endpoints for contact operations"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ...models import Contact
from ...shared.errors import route_errors
from .schemas import ContactCreate, ContactResponse, ContactUpdate
from .service import ContactService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/contacts", tags=["Contacts"])


def get_contact_service(db: Session = Depends(get_db)) -> ContactService:
    """Dependency injection for ContactService"""
    return ContactService(db)


def _to_response(c: Contact) -> ContactResponse:
    return ContactResponse(
        id=c.id,
        name=c.name,
        email=c.email,
        phone=c.phone,
        company=c.company,
        role=c.role,
        notes=c.notes,
        createdAt=c.created_at,
        updatedAt=c.updated_at,
    )


@router.get("", response_model=list[ContactResponse])
async def get_contacts(
    search: Optional[str] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=500),
    service: ContactService = Depends(get_contact_service),
):
    """List contacts alphabetically"""
    with route_errors("fetch contacts"):
        return [_to_response(c) for c in service.get_contacts(search, limit)]


@router.get("/{contact_id}", response_model=ContactResponse)
async def get_contact(contact_id: int, service: ContactService = Depends(get_contact_service)):
    with route_errors("fetch contact"):
        return _to_response(service.get_contact(contact_id))


@router.post("", response_model=ContactResponse)
async def create_contact(data: ContactCreate, service: ContactService = Depends(get_contact_service)):
    with route_errors("create contact"):
        return _to_response(service.create_contact(data))


@router.put("/{contact_id}", response_model=ContactResponse)
@router.patch("/{contact_id}", response_model=ContactResponse)
async def update_contact(
    contact_id: int,
    data: ContactUpdate,
    service: ContactService = Depends(get_contact_service),
):
    with route_errors("update contact"):
        return _to_response(service.update_contact(contact_id, data))


@router.delete("/{contact_id}")
async def delete_contact(contact_id: int, service: ContactService = Depends(get_contact_service)):
    with route_errors("delete contact"):
        return service.delete_contact(contact_id)
