"""Spreadsheet import: parse .xlsx/.csv uploads and turn mapped rows into deals"""

import csv
import io
import logging
from datetime import date, datetime
from typing import Any, Optional

from fastapi import HTTPException
from openpyxl import load_workbook
from pydantic import ValidationError
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...models import Contact, Song
from .lifecycle import DealStatus, normalize_status
from .schemas import DealCreate, DealImportRequest
from .service import DealService

logger = logging.getLogger(__name__)

ALLOWED_IMPORT_EXTENSIONS = {".xlsx", ".csv"}
PREVIEW_ROWS = 5
DEFAULT_PROJECT_TYPE = "other"

# mapping key -> deal field, for columns copied straight across
DIRECT_FIELDS = {
    "projectType": "project_type",
    "territory": "territory",
    "projectDescription": "project_description",
    "term": "term",
    "usage": "usage",
    "totalFee": "deal_value",
    "publishingFee": "full_song_value",
    "recordingFee": "full_recording_fee",
    "notes": "notes",
}

TRUTHY = {"yes", "y", "true", "1", "exclusive", "x"}


def _cell_to_json(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return value


def _read_xlsx(content: bytes) -> tuple[list[str], list[dict]]:
    workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    try:
        sheet = workbook.worksheets[0]
        rows = sheet.iter_rows(values_only=True)
        header_row = next(rows, None)
        if header_row is None:
            return [], []

        headers = [str(h).strip() if h is not None else f"Column {i + 1}" for i, h in enumerate(header_row)]
        data = []
        for row in rows:
            if row is None or all(cell is None or str(cell).strip() == "" for cell in row):
                continue
            data.append({headers[i]: _cell_to_json(cell) for i, cell in enumerate(row) if i < len(headers)})
        return headers, data
    finally:
        workbook.close()


def _read_csv(content: bytes) -> tuple[list[str], list[dict]]:
    text = content.decode("utf-8-sig", errors="replace")
    reader = csv.DictReader(io.StringIO(text))
    headers = [h.strip() for h in (reader.fieldnames or [])]
    data = []
    for row in reader:
        values = {(k or "").strip(): v for k, v in row.items() if k is not None}
        if all(v is None or str(v).strip() == "" for v in values.values()):
            continue
        data.append(values)
    return headers, data


def parse_spreadsheet(filename: str, content: bytes) -> dict:
    """
    Read the first sheet of an upload into header names and row dicts.

    Raises HTTPException(400) for anything that is not .xlsx or .csv.
    """
    name = (filename or "").lower()
    extension = name[name.rfind(".") :] if "." in name else ""
    if extension not in ALLOWED_IMPORT_EXTENSIONS:
        raise HTTPException(status_code=400, detail="Only .xlsx and .csv files are supported")

    if extension == ".xlsx":
        headers, data = _read_xlsx(content)
    else:
        headers, data = _read_csv(content)

    logger.info(f"📊 Parsed {len(data)} row(s) from {filename}")
    return {
        "headers": headers,
        "data": data,
        "preview": data[:PREVIEW_ROWS],
        "totalRows": len(data),
    }


def _text(row: dict, mapping: dict, key: str) -> Optional[str]:
    column = mapping.get(key)
    if not column:
        return None
    value = row.get(column)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


class DealImporter:
    """Creates deals row by row; a failing row is recorded and skipped, never rolled back"""

    def __init__(self, db: Session):
        self.db = db
        self.deals = DealService(db)
        self.created_songs = 0
        self.created_contacts = 0

    def _find_or_create_song(self, row: dict, mapping: dict, auto_create: bool) -> Optional[int]:
        title = _text(row, mapping, "songTitle")
        if not title:
            return None

        song = self.db.query(Song).filter(func.lower(Song.title) == title.lower()).first()
        if song:
            return song.id
        if not auto_create:
            return None

        song = Song(
            title=title,
            artist=_text(row, mapping, "songArtist") or "Unknown Artist",
            composer=_text(row, mapping, "songComposer"),
            publisher=_text(row, mapping, "songPublisher"),
        )
        self.db.add(song)
        self.db.commit()
        self.db.refresh(song)
        self.created_songs += 1
        return song.id

    def _find_or_create_contact(self, row: dict, mapping: dict, auto_create: bool) -> Optional[int]:
        email = _text(row, mapping, "contactEmail")
        name = _text(row, mapping, "contactName")
        if not email:
            return None

        email = email.lower()
        contact = self.db.query(Contact).filter(Contact.email == email).first()
        if contact:
            return contact.id
        if not auto_create:
            return None

        contact = Contact(
            name=name or email,
            email=email,
            phone=_text(row, mapping, "contactPhone"),
            company=_text(row, mapping, "contactCompany"),
        )
        self.db.add(contact)
        self.db.commit()
        self.db.refresh(contact)
        self.created_contacts += 1
        return contact.id

    def _row_to_deal(self, row: dict, request: DealImportRequest) -> DealCreate:
        mapping = request.mapping
        project_name = _text(row, mapping, "projectName")
        if not project_name:
            raise ValueError("Project name is empty")

        values: dict[str, Any] = {"project_name": project_name, "project_type": DEFAULT_PROJECT_TYPE}
        for key, field in DIRECT_FIELDS.items():
            value = _text(row, mapping, key)
            if value is not None:
                values[field] = value

        raw_status = _text(row, mapping, "status")
        status = normalize_status(raw_status) if raw_status else None
        values["status"] = (status or DealStatus.NEW_REQUEST).value

        exclusivity = _text(row, mapping, "exclusivity")
        if exclusivity is not None:
            values["exclusivity"] = exclusivity.lower() in TRUTHY

        air_date = _text(row, mapping, "airDate")
        if air_date:
            values["air_date"] = _parse_sheet_date(air_date)

        values["song_id"] = self._find_or_create_song(row, mapping, request.autoCreateSongs)
        values["contact_id"] = self._find_or_create_contact(row, mapping, request.autoCreateContacts)

        return DealCreate(**values)

    def run(self, request: DealImportRequest) -> dict:
        created = 0
        errors = []

        for index, row in enumerate(request.data, start=1):
            try:
                self.deals.create_deal(self._row_to_deal(row, request))
                created += 1
            except ValidationError as e:
                messages = "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors())
                errors.append({"row": index, "error": messages})
            except HTTPException as e:
                errors.append({"row": index, "error": str(e.detail)})
            except (ValueError, TypeError) as e:
                self.db.rollback()
                errors.append({"row": index, "error": str(e)})
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"❌ Import row {index} failed in the database: {e}")
                errors.append({"row": index, "error": f"Database error: {e.__class__.__name__}"})

        logger.info(f"✅ Import finished: {created} created, {len(errors)} failed")
        if errors:
            logger.warning(f"⚠️ Import row failures: {errors[:5]}")

        return {
            "created": created,
            "failed": len(errors),
            "errors": errors,
            "createdSongs": self.created_songs,
            "createdContacts": self.created_contacts,
        }


def _parse_sheet_date(value: str) -> str:
    """Normalize ISO, US (MM/DD/YYYY) and European dotted dates to YYYY-MM-DD."""
    value = value.strip()
    for fmt in ("%Y-%m-%d", "%Y-%m-%dT%H:%M:%S", "%m/%d/%Y", "%m/%d/%y", "%d.%m.%Y"):
        try:
            return datetime.strptime(value, fmt).date().isoformat()
        except ValueError:
            continue
    raise ValueError(f"Unrecognized air date '{value}'")
