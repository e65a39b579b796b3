"""Contact service - Business logic for contact operations"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Contact
from ...utils.sanitization import sanitize_string
from .repository import ContactRepository
from .schemas import ContactCreate, ContactUpdate

logger = logging.getLogger(__name__)


class ContactService:
    """Service layer for contact business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ContactRepository()

    def get_contacts(self, search: Optional[str] = None, limit: Optional[int] = None) -> list[Contact]:
        return self.repo.get_contacts(self.db, search, limit)

    def get_contact(self, contact_id: int) -> Contact:
        """Get a specific contact"""
        contact = self.repo.get_contact_by_id(self.db, contact_id)
        if not contact:
            raise HTTPException(status_code=404, detail="Contact not found")
        return contact

    def create_contact(self, data: ContactCreate) -> Contact:
        logger.info(f"📥 Creating contact: {data.email}")
        return self.repo.create_contact(
            self.db,
            name=data.name,
            email=data.email,
            phone=data.phone,
            company=data.company,
            role=data.role,
            notes=sanitize_string(data.notes),
        )

    def update_contact(self, contact_id: int, data: ContactUpdate) -> Contact:
        """Update a contact"""
        contact = self.get_contact(contact_id)

        updates = {}
        if data.name is not None:
            updates["name"] = data.name
        if data.email is not None:
            updates["email"] = data.email
        if data.phone is not None:
            updates["phone"] = data.phone
        if data.company is not None:
            updates["company"] = data.company
        if data.role is not None:
            updates["role"] = data.role
        if data.notes is not None:
            updates["notes"] = sanitize_string(data.notes)

        return self.repo.update_contact(self.db, contact, **updates)

    def delete_contact(self, contact_id: int) -> dict:
        contact = self.get_contact(contact_id)
        self.repo.delete_contact(self.db, contact)
        return {"success": True}
