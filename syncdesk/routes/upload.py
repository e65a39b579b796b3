import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional

import boto3
from botocore.config import Config
from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import FileResponse, RedirectResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from .. import config
from ..config import get_server_settings
from ..database import get_db
from ..models import Attachment
from ..shared.errors import route_errors
from ..utils.sanitization import sanitize_string

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Upload"])
attachments_router = APIRouter(prefix="/attachments", tags=["Upload"])

# Presigned URL expiration time (1 hour)
PRESIGNED_URL_EXPIRATION = 3600

R2_KEY_PREFIX = "attachments"

ALLOWED_EXTENSIONS = {
    ".jpeg", ".jpg", ".png", ".gif", ".pdf", ".doc", ".docx", ".txt",
    ".mp3", ".wav", ".aiff", ".flac", ".m4a", ".zip", ".rar",
}

ALLOWED_MIME_TYPES = {
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
    "audio/mpeg",
    "audio/mp3",
    "audio/wav",
    "audio/x-wav",
    "audio/wave",
    "audio/aiff",
    "audio/x-aiff",
    "audio/flac",
    "audio/x-flac",
    "audio/mp4",
    "audio/x-m4a",
    "audio/m4a",
    "application/zip",
    "application/x-zip-compressed",
    "application/vnd.rar",
    "application/x-rar-compressed",
}

DANGEROUS_FILENAME_CHARS = ["..", "/", "\\", "<", ">", ":", '"', "|", "?", "*"]

ENTITY_TYPES = ("deal", "song", "contact", "pitch")


def r2_enabled() -> bool:
    return bool(config.R2_ACCOUNT_ID and config.R2_ACCESS_KEY_ID and config.R2_SECRET_ACCESS_KEY)


def get_r2_client():
    """Create and return an R2 client."""
    return boto3.client(
        "s3",
        endpoint_url=f"https://{config.R2_ACCOUNT_ID}.r2.cloudflarestorage.com",
        aws_access_key_id=config.R2_ACCESS_KEY_ID,
        aws_secret_access_key=config.R2_SECRET_ACCESS_KEY,
        config=Config(signature_version="s3v4"),
    )


def generate_presigned_url(key: str, expiration: int = PRESIGNED_URL_EXPIRATION) -> str:
    """Generate a presigned URL for accessing a private object in R2."""
    r2 = get_r2_client()
    try:
        url = r2.generate_presigned_url(
            "get_object",
            Params={"Bucket": config.R2_BUCKET_NAME, "Key": key},
            ExpiresIn=expiration,
        )
        logger.info(f"✅ Generated presigned URL for key: {key}")
        return url
    except Exception as e:
        logger.error(f"❌ Failed to generate presigned URL for key {key}: {e}")
        raise


def store_file(filename: str, contents: bytes, content_type: str) -> str:
    """Write an upload to R2 when configured, else to the local upload directory. Returns its path or key."""
    if r2_enabled():
        key = f"{R2_KEY_PREFIX}/{filename}"
        get_r2_client().put_object(
            Bucket=config.R2_BUCKET_NAME,
            Key=key,
            Body=contents,
            ContentType=content_type,
        )
        logger.info(f"✅ Stored {filename} in R2 as {key}")
        return key

    upload_dir = Path(config.UPLOAD_DIR)
    upload_dir.mkdir(parents=True, exist_ok=True)
    path = upload_dir / filename
    path.write_bytes(contents)
    logger.info(f"✅ Stored {filename} locally at {path}")
    return str(path)


def is_r2_key(path: str) -> bool:
    return path.startswith(f"{R2_KEY_PREFIX}/") and ".." not in path and "\\" not in path


def local_upload_path(path: str) -> Optional[Path]:
    """The resolved path when it lies inside UPLOAD_DIR, else None."""
    upload_dir = Path(config.UPLOAD_DIR).resolve()
    resolved = Path(path).resolve()
    if resolved != upload_dir and resolved.is_relative_to(upload_dir):
        return resolved
    return None


def check_storage_path(path: str) -> str:
    """Accept only R2 keys under the attachments prefix or files inside UPLOAD_DIR."""
    if is_r2_key(path) or local_upload_path(path) is not None:
        return path
    logger.warning(f"❌ Rejected attachment path outside storage: '{path}'")
    raise HTTPException(status_code=400, detail="Invalid attachment path")


def remove_stored_file(path: str) -> None:
    if is_r2_key(path):
        if r2_enabled():
            get_r2_client().delete_object(Bucket=config.R2_BUCKET_NAME, Key=path)
        return

    local_path = local_upload_path(path)
    if local_path is None:
        logger.warning(f"⚠️ Refusing to delete '{path}': outside {config.UPLOAD_DIR}")
        return
    if local_path.is_file():
        local_path.unlink()


def validate_upload_name(filename: Optional[str]) -> str:
    """Return the lowercase extension of an acceptable filename or raise 400."""
    if not filename:
        raise HTTPException(status_code=400, detail="No file uploaded")

    for char in DANGEROUS_FILENAME_CHARS:
        if char in filename:
            logger.warning(f"❌ Dangerous character '{char}' detected in filename: '{filename}'")
            raise HTTPException(status_code=400, detail=f"Invalid filename - contains dangerous character '{char}'")

    if len(filename) > 255:
        raise HTTPException(status_code=400, detail="Filename too long - maximum 255 characters")

    ext = Path(filename).suffix.lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise HTTPException(status_code=400, detail="Invalid file type")
    return ext


class AttachmentCreate(BaseModel):
    filename: str
    originalName: str
    mimeType: str
    size: int
    path: str
    entityType: str
    entityId: int
    description: Optional[str] = None


class AttachmentResponse(BaseModel):
    id: int
    filename: str
    originalName: str
    mimeType: str
    size: int
    path: str
    url: str
    entityType: str
    entityId: int
    description: Optional[str] = None
    createdAt: Optional[datetime] = None


def _attachment_response(a: Attachment) -> AttachmentResponse:
    return AttachmentResponse(
        id=a.id,
        filename=a.filename,
        originalName=a.original_name,
        mimeType=a.mime_type,
        size=a.size,
        path=a.path,
        url=f"/api/files/{a.filename}",
        entityType=a.entity_type,
        entityId=a.entity_id,
        description=a.description,
        createdAt=a.created_at,
    )


def _check_entity_type(entity_type: str) -> str:
    entity_type = entity_type.strip().lower()
    if entity_type not in ENTITY_TYPES:
        raise HTTPException(status_code=400, detail=f"Invalid entityType. Expected one of: {', '.join(ENTITY_TYPES)}")
    return entity_type


# ============================================================================
# UPLOAD & FILE SERVING
# ============================================================================


@router.post("/upload", response_model=AttachmentResponse, status_code=201)
async def upload_file(
    file: UploadFile = File(...),
    entityType: str = Form(...),
    entityId: int = Form(...),
    description: Optional[str] = Form(None),
    db: Session = Depends(get_db),
):
    """Store an attachment for a deal, song, contact or pitch."""
    logger.info(f"📤 Uploading '{file.filename}' for {entityType} {entityId}")

    ext = validate_upload_name(file.filename)
    if file.content_type not in ALLOWED_MIME_TYPES:
        logger.warning(f"❌ Rejected MIME type {file.content_type} for '{file.filename}'")
        raise HTTPException(status_code=400, detail="Invalid file type")
    entity_type = _check_entity_type(entityType)

    contents = await file.read()
    max_bytes = get_server_settings().max_upload_bytes
    if len(contents) > max_bytes:
        raise HTTPException(
            status_code=400,
            detail=f"File size exceeds {max_bytes // (1024 * 1024)}MB limit. Your file is {len(contents) / (1024 * 1024):.2f}MB.",
        )

    stored_name = f"{uuid.uuid4().hex}{ext}"
    with route_errors("upload file"):
        path = store_file(stored_name, contents, file.content_type)
        attachment = Attachment(
            filename=stored_name,
            original_name=file.filename,
            mime_type=file.content_type,
            size=len(contents),
            path=path,
            entity_type=entity_type,
            entity_id=entityId,
            description=sanitize_string(description),
        )
        db.add(attachment)
        db.commit()
        db.refresh(attachment)
        return _attachment_response(attachment)


@router.get("/files/{filename}")
async def get_file(filename: str, db: Session = Depends(get_db)):
    """Serve a stored attachment: the local file, or a redirect to a short-lived R2 URL."""
    if any(char in filename for char in DANGEROUS_FILENAME_CHARS):
        raise HTTPException(status_code=400, detail="Invalid filename")

    attachment = db.query(Attachment).filter(Attachment.filename == filename).first()

    if r2_enabled():
        key = attachment.path if attachment else f"{R2_KEY_PREFIX}/{filename}"
        with route_errors("generate file URL"):
            return RedirectResponse(generate_presigned_url(key), status_code=302)

    path = Path(config.UPLOAD_DIR) / filename
    if not path.is_file():
        raise HTTPException(status_code=404, detail="File not found")
    media_type = attachment.mime_type if attachment else None
    download_name = attachment.original_name if attachment else filename
    return FileResponse(path, media_type=media_type, filename=download_name)


# ============================================================================
# ATTACHMENT RECORDS
# ============================================================================


@attachments_router.get("", response_model=list[AttachmentResponse])
async def get_attachments(
    entityType: Optional[str] = Query(None),
    entityId: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    with route_errors("fetch attachments"):
        query = db.query(Attachment)
        if entityType:
            query = query.filter(Attachment.entity_type == entityType)
        if entityId:
            query = query.filter(Attachment.entity_id == entityId)
        return [_attachment_response(a) for a in query.order_by(Attachment.created_at.desc(), Attachment.id.desc()).all()]


@attachments_router.get("/{attachment_id}", response_model=AttachmentResponse)
async def get_attachment(attachment_id: int, db: Session = Depends(get_db)):
    with route_errors("fetch attachment"):
        attachment = db.query(Attachment).filter(Attachment.id == attachment_id).first()
        if not attachment:
            raise HTTPException(status_code=404, detail="Attachment not found")
        return _attachment_response(attachment)


@attachments_router.post("", response_model=AttachmentResponse, status_code=201)
async def create_attachment(data: AttachmentCreate, db: Session = Depends(get_db)):
    """Register an attachment record for a file stored elsewhere"""
    with route_errors("create attachment"):
        attachment = Attachment(
            filename=data.filename,
            original_name=data.originalName,
            mime_type=data.mimeType,
            size=data.size,
            path=check_storage_path(data.path),
            entity_type=_check_entity_type(data.entityType),
            entity_id=data.entityId,
            description=sanitize_string(data.description),
        )
        db.add(attachment)
        db.commit()
        db.refresh(attachment)
        return _attachment_response(attachment)


@attachments_router.delete("/{attachment_id}")
async def delete_attachment(attachment_id: int, db: Session = Depends(get_db)):
    """Delete the record and, best effort, the stored file"""
    with route_errors("delete attachment"):
        attachment = db.query(Attachment).filter(Attachment.id == attachment_id).first()
        if not attachment:
            raise HTTPException(status_code=404, detail="Attachment not found")

        path = attachment.path
        db.delete(attachment)
        db.commit()

    try:
        remove_stored_file(path)
    except Exception as e:
        logger.warning(f"⚠️ Attachment {attachment_id} deleted but its file was not: {e}")
    return {"success": True}
