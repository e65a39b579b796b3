"""Contact repository - Database operations for contacts"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...models import Contact


class ContactRepository:
    """Repository for contact database operations"""

    @staticmethod
    def get_contacts(db: Session, search: Optional[str] = None, limit: Optional[int] = None) -> list[Contact]:
        """Get contacts alphabetically, optionally matching name, email or company"""
        query = db.query(Contact)

        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(Contact.name.ilike(pattern), Contact.email.ilike(pattern), Contact.company.ilike(pattern))
            )

        query = query.order_by(Contact.name.asc())
        if limit:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def get_contact_by_id(db: Session, contact_id: int) -> Optional[Contact]:
        return db.query(Contact).filter(Contact.id == contact_id).first()

    @staticmethod
    def create_contact(db: Session, **contact_data) -> Contact:
        """Create a new contact"""
        contact = Contact(**contact_data)
        db.add(contact)
        db.commit()
        db.refresh(contact)
        return contact

    @staticmethod
    def update_contact(db: Session, contact: Contact, **updates) -> Contact:
        """Update a contact with provided fields"""
        for key, value in updates.items():
            if value is not None and hasattr(contact, key):
                setattr(contact, key, value)

        db.commit()
        db.refresh(contact)
        return contact

    @staticmethod
    def delete_contact(db: Session, contact: Contact) -> None:
        db.delete(contact)
        db.commit()
