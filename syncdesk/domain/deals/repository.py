"""Deal repository - Database operations for deals"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from ...models import CalendarEvent, Contact, Deal, Song


class DealRepository:
    """Repository for deal database operations"""

    @staticmethod
    def get_deals(
        db: Session,
        status: Optional[str] = None,
        song_id: Optional[int] = None,
        contact_id: Optional[int] = None,
        search: Optional[str] = None,
    ) -> list[Deal]:
        """Get deals with their song and contact, newest first"""
        query = db.query(Deal).options(joinedload(Deal.song), joinedload(Deal.contact))

        if status:
            query = query.filter(Deal.status == status)
        if song_id:
            query = query.filter(Deal.song_id == song_id)
        if contact_id:
            query = query.filter(Deal.contact_id == contact_id)
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(
                    Deal.project_name.ilike(pattern),
                    Deal.project_description.ilike(pattern),
                    Deal.licensee_company_name.ilike(pattern),
                )
            )

        return query.order_by(Deal.created_at.desc(), Deal.id.desc()).all()

    @staticmethod
    def get_all_deals(db: Session) -> list[Deal]:
        """Get every deal with its song, oldest first"""
        return db.query(Deal).options(joinedload(Deal.song)).order_by(Deal.id).all()

    @staticmethod
    def get_deal_by_id(db: Session, deal_id: int) -> Optional[Deal]:
        """Get a specific deal by ID"""
        return (
            db.query(Deal)
            .options(joinedload(Deal.song), joinedload(Deal.contact))
            .filter(Deal.id == deal_id)
            .first()
        )

    @staticmethod
    def get_song(db: Session, song_id: int) -> Optional[Song]:
        return db.query(Song).filter(Song.id == song_id).first()

    @staticmethod
    def get_contact_by_email(db: Session, email: str) -> Optional[Contact]:
        return db.query(Contact).filter(Contact.email == email).first()

    @staticmethod
    def create_deal(db: Session, **deal_data) -> Deal:
        """Create a new deal"""
        deal = Deal(**deal_data)
        db.add(deal)
        db.commit()
        db.refresh(deal)
        return deal

    @staticmethod
    def update_deal(db: Session, deal: Deal, **updates) -> Deal:
        """Update a deal with provided fields; a None value clears the column"""
        for key, value in updates.items():
            if hasattr(deal, key):
                setattr(deal, key, value)

        db.commit()
        db.refresh(deal)
        return deal

    @staticmethod
    def delete_deal(db: Session, deal: Deal) -> None:
        """Delete a deal"""
        db.delete(deal)
        db.commit()

    @staticmethod
    def create_contacts(db: Session, contacts: list[dict]) -> list[Contact]:
        """Insert several contacts in one commit"""
        created = [Contact(**data) for data in contacts]
        db.add_all(created)
        db.commit()
        return created

    @staticmethod
    def create_calendar_event(db: Session, **event_data) -> CalendarEvent:
        event = CalendarEvent(**event_data)
        db.add(event)
        db.commit()
        db.refresh(event)
        return event
