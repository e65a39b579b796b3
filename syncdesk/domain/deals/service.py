"""Deal service - Business logic for deal operations"""

import copy
import logging
from datetime import datetime, time
from itertools import zip_longest
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Deal, Song
from ...utils.sanitization import sanitize_fields
from .fees import FEE_CHAINS, recompute_fees
from .income import EXPORT_FILENAMES, REPORT_KINDS, build_income_report, build_report_workbook
from .lifecycle import STATUS_DATE_FIELDS, normalize_status, stamp_status_date
from .repository import DealRepository
from .schemas import DealCreate, DealUpdate, IncomeShareUpdate

logger = logging.getLogger(__name__)

SANITIZED_FIELDS = ("project_description", "exclusivity_restrictions", "notes")

# (role, contact name, email, phone, company, address) columns per counterparty block
CONTACT_BLOCKS = [
    (
        "Licensee/Production Company Contact",
        "licensee_contact_name",
        "licensee_contact_email",
        "licensee_contact_phone",
        "licensee_company_name",
        "licensee_address",
    ),
    (
        "Music Supervisor",
        "music_supervisor_contact_name",
        "music_supervisor_contact_email",
        "music_supervisor_contact_phone",
        "music_supervisor_name",
        "music_supervisor_address",
    ),
    (
        "Clearance Company Contact",
        "clearance_company_contact_name",
        "clearance_company_contact_email",
        "clearance_company_contact_phone",
        "clearance_company_name",
        "clearance_company_address",
    ),
]

AIR_DATE_TITLE_PREFIX = "Air Date:"
AIR_DATE_REMINDER_MINUTES = 1440


def _split_credits(value: Optional[str]) -> list[str]:
    return [part.strip() for part in (value or "").split(",") if part.strip()]


def composer_publishers_from_song(song: Song) -> list[dict]:
    """Structured composer/publisher entries for a song, zipping legacy strings when needed."""
    if song.composer_publishers:
        return copy.deepcopy(song.composer_publishers)
    return [
        {"composer": composer or "", "publisher": publisher or "", "publishingOwnership": None, "isMine": False}
        for composer, publisher in zip_longest(_split_credits(song.composer), _split_credits(song.publisher))
    ]


def artist_labels_from_song(song: Song) -> list[dict]:
    """Structured artist/label entries for a song, zipping legacy strings when needed."""
    if song.artist_labels:
        return copy.deepcopy(song.artist_labels)
    return [
        {"artist": artist or "", "label": label or "", "labelOwnership": None, "isMine": False}
        for artist, label in zip_longest(_split_credits(song.artist), _split_credits(song.label))
    ]


class DealService:
    """Service layer for deal business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = DealRepository()

    def get_deals(
        self,
        status: Optional[str] = None,
        song_id: Optional[int] = None,
        contact_id: Optional[int] = None,
        search: Optional[str] = None,
    ) -> list[Deal]:
        """Get deals, optionally filtered"""
        if status:
            canonical = normalize_status(status)
            status = canonical.value if canonical else status
        return self.repo.get_deals(self.db, status, song_id, contact_id, search)

    def get_deal(self, deal_id: int) -> Deal:
        """Get a specific deal"""
        deal = self.repo.get_deal_by_id(self.db, deal_id)
        if not deal:
            raise HTTPException(status_code=404, detail="Deal not found")
        return deal

    def _get_song(self, song_id: int) -> Song:
        song = self.repo.get_song(self.db, song_id)
        if not song:
            raise HTTPException(status_code=404, detail="Song not found")
        return song

    def _clean(self, values: dict) -> dict:
        return sanitize_fields(values, SANITIZED_FIELDS)

    def create_deal(self, data: DealCreate) -> Deal:
        """Create a deal: snapshot the song's splits, stamp the status date, derive fees"""
        logger.info(f"📥 Creating deal: {data.project_name}")

        values = data.model_dump(exclude_none=True)
        if data.composer_publishers is not None:
            values["composer_publishers"] = [e.model_dump() for e in data.composer_publishers]
        if data.artist_labels is not None:
            values["artist_labels"] = [e.model_dump() for e in data.artist_labels]
        self._clean(values)

        # Copy-on-create: the deal keeps its own snapshot from here on
        if data.song_id:
            song = self._get_song(data.song_id)
            if data.composer_publishers is None:
                values["composer_publishers"] = composer_publishers_from_song(song)
            if data.artist_labels is None:
                values["artist_labels"] = artist_labels_from_song(song)

        stamp_status_date(values, values.get("status"))
        recompute_fees(values)

        deal = self.repo.create_deal(self.db, **values)
        logger.info(f"✅ Deal {deal.id} created with status {deal.status}")

        if deal.air_date:
            self._create_air_date_event(deal)
        self._extract_contacts(deal)

        return self.get_deal(deal.id)

    def update_deal(self, deal_id: int, data: DealUpdate) -> Deal:
        """Apply a partial update, stamping and recomputing as the changed fields require"""
        deal = self.get_deal(deal_id)

        raw = data.model_dump(exclude_unset=True)
        # An explicit null clears a lifecycle date; elsewhere it means "leave as is"
        cleared = {field: None for field in STATUS_DATE_FIELDS.values() if field in raw and raw[field] is None}
        updates = {key: value for key, value in raw.items() if value is not None}
        if data.composer_publishers is not None:
            updates["composer_publishers"] = [e.model_dump() for e in data.composer_publishers]
        if data.artist_labels is not None:
            updates["artist_labels"] = [e.model_dump() for e in data.artist_labels]
        self._clean(updates)

        # An explicit date in the same request wins over the stamp, as does a clear
        status = normalize_status(updates.get("status"))
        if status is not None:
            field = STATUS_DATE_FIELDS[status]
            if field not in cleared:
                merged = {field: updates.get(field) or getattr(deal, field)}
                stamp_status_date(merged, status)
                if merged[field] != getattr(deal, field):
                    updates[field] = merged[field]
                    logger.info(f"Deal {deal_id} entered {status.value}, {field} set to {merged[field]}")

        recompute_fees(updates, current=deal, touched=set(updates))
        updates.update(cleared)

        deal = self.repo.update_deal(self.db, deal, **updates)
        self._extract_contacts(deal)
        return deal

    def delete_deal(self, deal_id: int) -> dict:
        """Delete a deal (pitches, payments and events are left in place)"""
        deal = self.get_deal(deal_id)
        self.repo.delete_deal(self.db, deal)
        return {"success": True}

    def reload_splits(self, deal_id: int) -> Deal:
        """Replace the deal's ownership snapshots with the linked song's current lists"""
        deal = self.get_deal(deal_id)
        if not deal.song_id:
            raise HTTPException(status_code=400, detail="Deal has no linked song")
        song = self._get_song(deal.song_id)

        updates = {
            "composer_publishers": composer_publishers_from_song(song),
            "artist_labels": artist_labels_from_song(song),
        }
        recompute_fees(updates, current=deal, touched=set(updates))

        # Empty lists are a legitimate reload result, so assign directly
        for key, value in updates.items():
            setattr(deal, key, value)
        self.db.commit()
        self.db.refresh(deal)
        logger.info(f"🔄 Reloaded splits for deal {deal_id} from song {song.id}")
        return deal

    def update_income_share(self, deal_id: int, data: IncomeShareUpdate) -> Deal:
        """Record jonasShare / paymentDate on one ownership entry"""
        deal = self.get_deal(deal_id)
        entries_field = FEE_CHAINS[data.chain][0]

        # JSON columns only persist on reassignment
        entries = copy.deepcopy(getattr(deal, entries_field) or [])
        if data.index < 0 or data.index >= len(entries):
            raise HTTPException(status_code=404, detail="Ownership entry not found")

        entries[data.index]["jonasShare"] = float(data.jonasShare) if data.jonasShare is not None else None
        entries[data.index]["paymentDate"] = data.paymentDate or None
        setattr(deal, entries_field, entries)
        self.db.commit()
        self.db.refresh(deal)
        return deal

    def _check_report(self, report: Optional[str]) -> Optional[str]:
        if report is None:
            return None
        report = report.strip().lower()
        if report not in REPORT_KINDS:
            raise HTTPException(status_code=400, detail=f"Invalid report. Expected one of: {', '.join(REPORT_KINDS)}")
        return report

    def get_income_report(self, report: Optional[str] = None) -> dict:
        return build_income_report(self.repo.get_all_deals(self.db), self._check_report(report))

    def export_income_report(self, report: str) -> tuple[str, bytes]:
        """The .xlsx filename and contents for one report view"""
        report = self._check_report(report)
        rows = build_income_report(self.repo.get_all_deals(self.db), report)["rows"]
        if not rows:
            raise HTTPException(status_code=404, detail="No data available for this report")
        logger.info(f"📊 Exporting {report} income report ({len(rows)} rows)")
        return EXPORT_FILENAMES[report], build_report_workbook(report, rows)

    def _create_air_date_event(self, deal: Deal) -> None:
        try:
            self.repo.create_calendar_event(
                self.db,
                title=f"{AIR_DATE_TITLE_PREFIX} {deal.project_name}",
                description=f'Project "{deal.project_name}" ({deal.project_type}) is scheduled to air.',
                start_date=datetime.combine(deal.air_date, time.min),
                all_day=True,
                entity_type="deal",
                entity_id=deal.id,
                reminder_minutes=AIR_DATE_REMINDER_MINUTES,
                status="scheduled",
            )
            logger.info(f"📅 Air date event created for deal {deal.id}")
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Failed to create air date event for deal {deal.id}: {e}")

    def _extract_contacts(self, deal: Deal) -> None:
        """Create contacts for counterparty blocks whose email is not on file yet"""
        to_create = []
        seen = set()
        for role, name_field, email_field, phone_field, company_field, address_field in CONTACT_BLOCKS:
            name = getattr(deal, name_field)
            email = getattr(deal, email_field)
            if not name or not email or email in seen:
                continue
            if self.repo.get_contact_by_email(self.db, email):
                continue
            seen.add(email)
            to_create.append(
                {
                    "name": name,
                    "email": email,
                    "phone": getattr(deal, phone_field) or "",
                    "company": getattr(deal, company_field) or "",
                    "role": role,
                    "notes": f"Contact from {deal.project_name} deal. Address: {getattr(deal, address_field) or 'Not provided'}",
                }
            )

        if to_create:
            try:
                self.repo.create_contacts(self.db, to_create)
                logger.info(f"👤 Extracted {len(to_create)} contact(s) from deal {deal.id}")
            except Exception as e:
                self.db.rollback()
                logger.error(f"❌ Failed to extract contacts from deal {deal.id}: {e}")
