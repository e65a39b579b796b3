import logging
import re
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import EmailTemplate, Template
from ..shared.errors import route_errors

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/templates", tags=["templates"])
email_router = APIRouter(prefix="/email-templates", tags=["templates"])

PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*(\w+)\s*\}\}")


def extract_variables(*texts: Optional[str]) -> list[str]:
    """Placeholder names ({{clientName}} -> clientName) in first-seen order"""
    seen: list[str] = []
    for text in texts:
        for name in PLACEHOLDER_PATTERN.findall(text or ""):
            if name not in seen:
                seen.append(name)
    return seen


def render_placeholders(text: str, values: dict[str, str]) -> str:
    """Fill {{name}} placeholders; unknown names are left as written"""
    return PLACEHOLDER_PATTERN.sub(lambda m: str(values.get(m.group(1), m.group(0))), text)


# ============================================================================
# DOCUMENT TEMPLATES (contracts, quotes, invoices)
# ============================================================================


class TemplateCreate(BaseModel):
    name: str
    type: str
    content: str


class TemplateUpdate(BaseModel):
    name: Optional[str] = None
    type: Optional[str] = None
    content: Optional[str] = None


class TemplateResponse(BaseModel):
    id: int
    name: str
    type: str
    content: str
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


def _template_response(t: Template) -> TemplateResponse:
    return TemplateResponse(
        id=t.id,
        name=t.name,
        type=t.type,
        content=t.content,
        createdAt=t.created_at,
        updatedAt=t.updated_at,
    )


def _get_template(db: Session, template_id: int) -> Template:
    template = db.query(Template).filter(Template.id == template_id).first()
    if not template:
        raise HTTPException(status_code=404, detail="Template not found")
    return template


@router.get("", response_model=list[TemplateResponse])
async def get_templates(type: Optional[str] = Query(None), db: Session = Depends(get_db)):
    """List templates, optionally of one type"""
    with route_errors("fetch templates"):
        query = db.query(Template)
        if type:
            query = query.filter(Template.type == type)
        return [_template_response(t) for t in query.order_by(Template.name.asc()).all()]


@router.get("/{template_id}", response_model=TemplateResponse)
async def get_template(template_id: int, db: Session = Depends(get_db)):
    with route_errors("fetch template"):
        return _template_response(_get_template(db, template_id))


@router.post("", response_model=TemplateResponse, status_code=201)
async def create_template(data: TemplateCreate, db: Session = Depends(get_db)):
    with route_errors("create template"):
        template = Template(name=data.name, type=data.type, content=data.content)
        db.add(template)
        db.commit()
        db.refresh(template)
        logger.info(f"✅ Template created: {template.name} ({template.type})")
        return _template_response(template)


@router.put("/{template_id}", response_model=TemplateResponse)
@router.patch("/{template_id}", response_model=TemplateResponse)
async def update_template(template_id: int, data: TemplateUpdate, db: Session = Depends(get_db)):
    with route_errors("update template"):
        template = _get_template(db, template_id)
        for key, value in data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(template, key, value)
        db.commit()
        db.refresh(template)
        return _template_response(template)


@router.delete("/{template_id}")
async def delete_template(template_id: int, db: Session = Depends(get_db)):
    with route_errors("delete template"):
        db.delete(_get_template(db, template_id))
        db.commit()
        return {"success": True}


# ============================================================================
# EMAIL TEMPLATES
# ============================================================================


class EmailTemplateCreate(BaseModel):
    name: str
    stage: str
    subject: str
    body: str
    variables: Optional[list[str]] = None


class EmailTemplateUpdate(BaseModel):
    name: Optional[str] = None
    stage: Optional[str] = None
    subject: Optional[str] = None
    body: Optional[str] = None
    variables: Optional[list[str]] = None


class EmailTemplateResponse(BaseModel):
    id: int
    name: str
    stage: str
    subject: str
    body: str
    variables: list[str]
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class EmailRenderRequest(BaseModel):
    values: dict[str, str] = {}


class EmailRenderResponse(BaseModel):
    subject: str
    body: str
    missing: list[str]


def _email_response(t: EmailTemplate) -> EmailTemplateResponse:
    return EmailTemplateResponse(
        id=t.id,
        name=t.name,
        stage=t.stage,
        subject=t.subject,
        body=t.body,
        variables=t.variables or [],
        createdAt=t.created_at,
        updatedAt=t.updated_at,
    )


def _get_email_template(db: Session, template_id: int) -> EmailTemplate:
    template = db.query(EmailTemplate).filter(EmailTemplate.id == template_id).first()
    if not template:
        raise HTTPException(status_code=404, detail="Email template not found")
    return template


@email_router.get("", response_model=list[EmailTemplateResponse])
async def get_email_templates(stage: Optional[str] = Query(None), db: Session = Depends(get_db)):
    with route_errors("fetch email templates"):
        query = db.query(EmailTemplate)
        if stage:
            query = query.filter(EmailTemplate.stage == stage)
        return [_email_response(t) for t in query.order_by(EmailTemplate.name.asc()).all()]


@email_router.get("/{template_id}", response_model=EmailTemplateResponse)
async def get_email_template(template_id: int, db: Session = Depends(get_db)):
    with route_errors("fetch email template"):
        return _email_response(_get_email_template(db, template_id))


@email_router.post("", response_model=EmailTemplateResponse, status_code=201)
async def create_email_template(data: EmailTemplateCreate, db: Session = Depends(get_db)):
    """Create an email template; variables default to the placeholders found in subject and body"""
    with route_errors("create email template"):
        template = EmailTemplate(
            name=data.name,
            stage=data.stage,
            subject=data.subject,
            body=data.body,
            variables=data.variables if data.variables is not None else extract_variables(data.subject, data.body),
        )
        db.add(template)
        db.commit()
        db.refresh(template)
        return _email_response(template)


@email_router.put("/{template_id}", response_model=EmailTemplateResponse)
@email_router.patch("/{template_id}", response_model=EmailTemplateResponse)
async def update_email_template(template_id: int, data: EmailTemplateUpdate, db: Session = Depends(get_db)):
    with route_errors("update email template"):
        template = _get_email_template(db, template_id)
        updates = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
        for key, value in updates.items():
            setattr(template, key, value)
        if "variables" not in updates and ("subject" in updates or "body" in updates):
            template.variables = extract_variables(template.subject, template.body)
        db.commit()
        db.refresh(template)
        return _email_response(template)


@email_router.delete("/{template_id}")
async def delete_email_template(template_id: int, db: Session = Depends(get_db)):
    with route_errors("delete email template"):
        db.delete(_get_email_template(db, template_id))
        db.commit()
        return {"success": True}


@email_router.post("/{template_id}/render", response_model=EmailRenderResponse)
async def render_email_template(template_id: int, data: EmailRenderRequest, db: Session = Depends(get_db)):
    """Fill the template's placeholders and report any left without a value"""
    with route_errors("render email template"):
        template = _get_email_template(db, template_id)
        wanted = extract_variables(template.subject, template.body)
        return EmailRenderResponse(
            subject=render_placeholders(template.subject, data.values),
            body=render_placeholders(template.body, data.values),
            missing=[name for name in wanted if name not in data.values],
        )
