"""Deal domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, field_validator
from pydantic.alias_generators import to_camel

from ...shared.validators import validate_email, validate_money, validate_percentage
from .lifecycle import DealStatus, normalize_status

MONEY_FIELDS = (
    "deal_value",
    "full_song_value",
    "our_fee",
    "full_recording_fee",
    "our_recording_fee",
)

DATE_FIELDS = (
    "pitched_date",
    "pending_approval_date",
    "quoted_date",
    "use_confirmed_date",
    "being_drafted_date",
    "out_for_signature_date",
    "payment_received_date",
    "completed_date",
    "air_date",
)

EMAIL_FIELDS = (
    "licensee_contact_email",
    "music_supervisor_contact_email",
    "clearance_company_contact_email",
)


def parse_status(value):
    """Normalize a deal status or raise ValueError naming the accepted values."""
    if value is None:
        return value
    status = normalize_status(value)
    if status is None:
        allowed = ", ".join(s.value for s in DealStatus)
        raise ValueError(f"Invalid status '{value}'. Expected one of: {allowed}")
    return status.value


def parse_day(value):
    """Accept YYYY-MM-DD or a full ISO timestamp and keep the day part."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and len(value) > 10 and value[4] == "-":
        return value[:10]
    return value


class ComposerPublisherEntry(BaseModel):
    """One composer/publisher pair on a song or deal"""

    composer: str = ""
    publisher: str = ""
    publishingOwnership: Optional[float] = None
    isMine: bool = False
    jonasShare: Optional[float] = None
    paymentDate: Optional[str] = None

    @field_validator("publishingOwnership", mode="before")
    @classmethod
    def validate_ownership(cls, v):
        pct = validate_percentage(v)
        return float(pct) if pct is not None else None

    @field_validator("jonasShare", mode="before")
    @classmethod
    def validate_jonas_share(cls, v):
        amount = validate_money(v)
        return float(amount) if amount is not None else None


class ArtistLabelEntry(BaseModel):
    """One artist/label pair on a song or deal"""

    artist: str = ""
    label: str = ""
    labelOwnership: Optional[float] = None
    isMine: bool = False
    jonasShare: Optional[float] = None
    paymentDate: Optional[str] = None

    @field_validator("labelOwnership", mode="before")
    @classmethod
    def validate_ownership(cls, v):
        pct = validate_percentage(v)
        return float(pct) if pct is not None else None

    @field_validator("jonasShare", mode="before")
    @classmethod
    def validate_jonas_share(cls, v):
        amount = validate_money(v)
        return float(amount) if amount is not None else None


class DealFields(BaseModel):
    """Every writable deal field, all optional"""

    project_name: Optional[str] = None
    episode_number: Optional[str] = None
    project_type: Optional[str] = None
    project_description: Optional[str] = None
    song_id: Optional[int] = None
    contact_id: Optional[int] = None
    status: Optional[str] = None

    deal_value: Optional[Decimal] = None
    full_song_value: Optional[Decimal] = None
    our_fee: Optional[Decimal] = None
    full_recording_fee: Optional[Decimal] = None
    our_recording_fee: Optional[Decimal] = None
    splits: Optional[str] = None
    artist_label_splits: Optional[str] = None
    composer_publishers: Optional[list[ComposerPublisherEntry]] = None
    artist_labels: Optional[list[ArtistLabelEntry]] = None

    pitched_date: Optional[date] = None
    pending_approval_date: Optional[date] = None
    quoted_date: Optional[date] = None
    use_confirmed_date: Optional[date] = None
    being_drafted_date: Optional[date] = None
    out_for_signature_date: Optional[date] = None
    payment_received_date: Optional[date] = None
    completed_date: Optional[date] = None
    air_date: Optional[date] = None
    pitch_date: Optional[datetime] = None
    payment_due_date: Optional[datetime] = None

    usage: Optional[str] = None
    media: Optional[str] = None
    territory: Optional[str] = None
    term: Optional[str] = None
    exclusivity: Optional[bool] = None
    exclusivity_restrictions: Optional[str] = None

    licensee_company_name: Optional[str] = None
    licensee_address: Optional[str] = None
    licensee_contact_name: Optional[str] = None
    licensee_contact_email: Optional[str] = None
    licensee_contact_phone: Optional[str] = None
    music_supervisor_name: Optional[str] = None
    music_supervisor_address: Optional[str] = None
    music_supervisor_contact_name: Optional[str] = None
    music_supervisor_contact_email: Optional[str] = None
    music_supervisor_contact_phone: Optional[str] = None
    clearance_company_name: Optional[str] = None
    clearance_company_address: Optional[str] = None
    clearance_company_contact_name: Optional[str] = None
    clearance_company_contact_email: Optional[str] = None
    clearance_company_contact_phone: Optional[str] = None

    writers: Optional[str] = None
    publishing_info: Optional[str] = None
    artist: Optional[str] = None
    label: Optional[str] = None
    notes: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v):
        return parse_status(v)

    @field_validator(*MONEY_FIELDS, mode="before")
    @classmethod
    def validate_amounts(cls, v):
        return validate_money(v)

    @field_validator(*DATE_FIELDS, mode="before")
    @classmethod
    def validate_days(cls, v):
        return parse_day(v)

    @field_validator("pitch_date", "payment_due_date", mode="before")
    @classmethod
    def validate_timestamps(cls, v):
        return v or None

    @field_validator(*EMAIL_FIELDS, mode="before")
    @classmethod
    def validate_emails(cls, v):
        if v:
            return validate_email(v)
        return None


class DealCreate(DealFields):
    """Schema for creating a new deal"""

    project_name: str
    project_type: str
    status: str = DealStatus.NEW_REQUEST.value
    territory: Optional[str] = "worldwide"
    exclusivity: Optional[bool] = False


class DealUpdate(DealFields):
    """Schema for a partial deal update (PUT and PATCH)"""


class SongSummary(BaseModel):
    id: int
    title: str
    artist: str

    class Config:
        from_attributes = True


class ContactSummary(BaseModel):
    id: int
    name: str
    email: str
    company: Optional[str] = None

    class Config:
        from_attributes = True


class DealResponse(DealFields):
    """Schema for deal response"""

    id: int
    project_name: str
    project_type: str
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    song: Optional[SongSummary] = None
    contact: Optional[ContactSummary] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True

    # Stored rows are echoed back as-is, even legacy ones
    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v):
        return v

    @field_validator(*EMAIL_FIELDS, mode="before")
    @classmethod
    def validate_emails(cls, v):
        return v


class IncomeShareUpdate(BaseModel):
    """Record the tracked amount for one ownership entry on a deal"""

    chain: Literal["publishing", "recording"]
    index: int
    jonasShare: Optional[Decimal] = None
    paymentDate: Optional[str] = None

    @field_validator("jonasShare", mode="before")
    @classmethod
    def validate_jonas_share(cls, v):
        return validate_money(v)


class IncomeRow(BaseModel):
    dealId: int
    entryIndex: int
    chain: str
    projectName: str
    songTitle: str
    party: str
    company: str
    ownership: Optional[Decimal] = None
    fullShareFee: Decimal
    jonasShare: Optional[Decimal] = None
    paymentDate: Optional[str] = None


class IncomeReport(BaseModel):
    publishing: list[IncomeRow]
    recording: list[IncomeRow]
    publishingTotal: Decimal
    recordingTotal: Decimal
    report: Optional[str] = None
    rows: list[IncomeRow] = []


class DealImportRequest(BaseModel):
    """Second step of a spreadsheet import: rows plus column mapping"""

    data: list[dict]
    mapping: dict[str, Optional[str]]
    autoCreateSongs: bool = True
    autoCreateContacts: bool = True

    @field_validator("mapping")
    @classmethod
    def validate_mapping(cls, v):
        if not v.get("projectName"):
            raise ValueError("mapping.projectName is required")
        return v


class DealImportError(BaseModel):
    row: int
    error: str


class DealImportResult(BaseModel):
    created: int
    failed: int
    errors: list[DealImportError]
    createdSongs: int = 0
    createdContacts: int = 0


class DealImportPreview(BaseModel):
    headers: list[str]
    data: list[dict]
    preview: list[dict]
    totalRows: int
