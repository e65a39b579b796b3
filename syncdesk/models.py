from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class Song(Base):
    __tablename__ = "songs"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    artist = Column(String(255), nullable=False)
    album = Column(String(255), nullable=True)
    genre = Column(String(100), nullable=True, index=True)
    mood = Column(String(100), nullable=True)
    tempo = Column(Integer, nullable=True)
    duration = Column(Integer, nullable=True)  # seconds
    key = Column(String(20), nullable=True)
    bpm = Column(Integer, nullable=True)
    lyrics = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    tags = Column(JSON, default=list, nullable=True)
    file_path = Column(String(500), nullable=True)
    # Legacy comma-joined credits, kept for songs entered before structured splits
    composer = Column(Text, nullable=True)
    publisher = Column(Text, nullable=True)
    label = Column(Text, nullable=True)
    publishing_ownership = Column(Numeric(5, 2), nullable=True)
    master_ownership = Column(Numeric(5, 2), nullable=True)
    # [{composer, publisher, publishingOwnership, isMine}]
    composer_publishers = Column(JSON, default=list, nullable=True)
    # [{artist, label, labelOwnership, isMine}]
    artist_labels = Column(JSON, default=list, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    deals = relationship("Deal", back_populates="song", passive_deletes=True)


class Contact(Base):
    __tablename__ = "contacts"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(50), nullable=True)
    company = Column(String(255), nullable=True)
    role = Column(String(255), nullable=True)  # music supervisor, licensee, clearance company
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    deals = relationship("Deal", back_populates="contact", passive_deletes=True)


class Deal(Base):
    __tablename__ = "deals"

    id = Column(Integer, primary_key=True, index=True)
    project_name = Column(String(255), nullable=False)
    episode_number = Column(String(50), nullable=True)
    project_type = Column(String(50), nullable=False)  # film, tv, commercial, game, ...
    project_description = Column(Text, nullable=True)
    song_id = Column(Integer, ForeignKey("songs.id"), nullable=True, index=True)
    contact_id = Column(Integer, ForeignKey("contacts.id"), nullable=True, index=True)
    status = Column(String(50), nullable=False, default="new_request", index=True)

    # Fees: publishing chain and recording chain
    deal_value = Column(Numeric(10, 2), nullable=True)
    full_song_value = Column(Numeric(10, 2), nullable=True)
    our_fee = Column(Numeric(10, 2), nullable=True)
    full_recording_fee = Column(Numeric(10, 2), nullable=True)
    our_recording_fee = Column(Numeric(10, 2), nullable=True)
    splits = Column(Text, nullable=True)  # free-text publishing splits
    artist_label_splits = Column(Text, nullable=True)  # free-text recording splits

    # Point-in-time copies of the song's ownership lists
    composer_publishers = Column(JSON, default=list, nullable=True)
    artist_labels = Column(JSON, default=list, nullable=True)

    # One date per lifecycle stage, see domain/deals/lifecycle.py
    pitched_date = Column(Date, nullable=True)
    pending_approval_date = Column(Date, nullable=True)
    quoted_date = Column(Date, nullable=True)
    use_confirmed_date = Column(Date, nullable=True)
    being_drafted_date = Column(Date, nullable=True)
    out_for_signature_date = Column(Date, nullable=True)
    payment_received_date = Column(Date, nullable=True)
    completed_date = Column(Date, nullable=True)

    air_date = Column(Date, nullable=True)
    pitch_date = Column(DateTime, nullable=True)
    payment_due_date = Column(DateTime, nullable=True)

    # License terms
    usage = Column(String(255), nullable=True)  # background, featured, opening, ...
    media = Column(String(255), nullable=True)
    territory = Column(String(100), nullable=True, default="worldwide")
    term = Column(String(100), nullable=True)  # perpetual, 1 year, ...
    exclusivity = Column(Boolean, default=False, nullable=True)
    exclusivity_restrictions = Column(Text, nullable=True)

    # Counterparties captured on the deal form
    licensee_company_name = Column(String(255), nullable=True)
    licensee_address = Column(Text, nullable=True)
    licensee_contact_name = Column(String(255), nullable=True)
    licensee_contact_email = Column(String(255), nullable=True)
    licensee_contact_phone = Column(String(50), nullable=True)
    music_supervisor_name = Column(String(255), nullable=True)
    music_supervisor_address = Column(Text, nullable=True)
    music_supervisor_contact_name = Column(String(255), nullable=True)
    music_supervisor_contact_email = Column(String(255), nullable=True)
    music_supervisor_contact_phone = Column(String(50), nullable=True)
    clearance_company_name = Column(String(255), nullable=True)
    clearance_company_address = Column(Text, nullable=True)
    clearance_company_contact_name = Column(String(255), nullable=True)
    clearance_company_contact_email = Column(String(255), nullable=True)
    clearance_company_contact_phone = Column(String(50), nullable=True)

    # Song information as typed on the deal
    writers = Column(Text, nullable=True)
    publishing_info = Column(Text, nullable=True)
    artist = Column(String(255), nullable=True)
    label = Column(String(255), nullable=True)

    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    song = relationship("Song", back_populates="deals")
    contact = relationship("Contact", back_populates="deals")
    pitches = relationship("Pitch", back_populates="deal", passive_deletes=True)
    payments = relationship("Payment", back_populates="deal", passive_deletes=True)


class Pitch(Base):
    __tablename__ = "pitches"

    id = Column(Integer, primary_key=True, index=True)
    deal_id = Column(Integer, ForeignKey("deals.id"), nullable=True, index=True)
    custom_deal_name = Column(String(255), nullable=True)  # when no formal deal exists yet
    submission_date = Column(DateTime, server_default=func.now(), nullable=False)
    follow_up_date = Column(DateTime, nullable=True)
    status = Column(String(50), nullable=False, default="pending")  # pending, responded, no_response
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    deal = relationship("Deal", back_populates="pitches")


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    deal_id = Column(Integer, ForeignKey("deals.id"), nullable=True, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    due_date = Column(DateTime, nullable=False)
    paid_date = Column(DateTime, nullable=True)
    status = Column(String(20), nullable=False, default="pending")  # pending, paid (overdue is derived)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    deal = relationship("Deal", back_populates="payments")


class Template(Base):
    __tablename__ = "templates"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    type = Column(String(50), nullable=False, index=True)  # contract, quote, invoice, ...
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class EmailTemplate(Base):
    __tablename__ = "email_templates"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    stage = Column(String(50), nullable=False, index=True)  # initial_pitch, follow_up, negotiation, ...
    subject = Column(String(500), nullable=False)
    body = Column(Text, nullable=False)
    variables = Column(JSON, default=list, nullable=True)  # {{clientName}}, {{songTitle}}, ...
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Attachment(Base):
    __tablename__ = "attachments"

    id = Column(Integer, primary_key=True, index=True)
    filename = Column(String(255), nullable=False, unique=True)
    original_name = Column(String(255), nullable=False)
    mime_type = Column(String(100), nullable=False)
    size = Column(Integer, nullable=False)
    path = Column(String(500), nullable=False)  # local path or R2 key
    entity_type = Column(String(50), nullable=False)  # deal, song, contact, pitch
    entity_id = Column(Integer, nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class CalendarEvent(Base):
    __tablename__ = "calendar_events"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    start_date = Column(DateTime, nullable=False, index=True)
    end_date = Column(DateTime, nullable=True)
    all_day = Column(Boolean, default=False)
    entity_type = Column(String(50), nullable=False)  # deal, pitch, payment
    entity_id = Column(Integer, nullable=False)
    reminder_minutes = Column(Integer, default=60)
    status = Column(String(20), default="scheduled")  # scheduled, completed, cancelled
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Playlist(Base):
    __tablename__ = "playlists"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    is_public = Column(Boolean, default=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    songs = relationship("PlaylistSong", back_populates="playlist", cascade="all, delete-orphan")


class PlaylistSong(Base):
    __tablename__ = "playlist_songs"

    id = Column(Integer, primary_key=True, index=True)
    playlist_id = Column(Integer, ForeignKey("playlists.id", ondelete="CASCADE"), nullable=False)
    song_id = Column(Integer, ForeignKey("songs.id"), nullable=False)
    position = Column(Integer, default=0)
    added_at = Column(DateTime, server_default=func.now())

    playlist = relationship("Playlist", back_populates="songs")


class SavedSearch(Base):
    __tablename__ = "saved_searches"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    entity_type = Column(String(50), nullable=False)  # songs, deals, contacts
    query = Column(JSON, default=dict, nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class WorkflowAutomation(Base):
    __tablename__ = "workflow_automations"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    trigger = Column(JSON, default=dict, nullable=False)  # {"type": "status_change", ...}
    actions = Column(JSON, default=list, nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
