import logging
from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import WorkflowAutomation
from ..shared.errors import route_errors
from ..utils.sanitization import sanitize_string

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/workflow-automation", tags=["Workflow Automation"])


class AutomationCreate(BaseModel):
    name: str
    description: Optional[str] = None
    trigger: dict[str, Any]
    actions: list[dict[str, Any]] = []
    isActive: bool = True


class AutomationUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    trigger: Optional[dict[str, Any]] = None
    actions: Optional[list[dict[str, Any]]] = None
    isActive: Optional[bool] = None


class AutomationResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    trigger: dict[str, Any]
    actions: list[dict[str, Any]]
    isActive: bool
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


def _to_response(a: WorkflowAutomation) -> AutomationResponse:
    return AutomationResponse(
        id=a.id,
        name=a.name,
        description=a.description,
        trigger=a.trigger or {},
        actions=a.actions or [],
        isActive=bool(a.is_active),
        createdAt=a.created_at,
        updatedAt=a.updated_at,
    )


def _get_automation(db: Session, automation_id: int) -> WorkflowAutomation:
    automation = db.query(WorkflowAutomation).filter(WorkflowAutomation.id == automation_id).first()
    if not automation:
        raise HTTPException(status_code=404, detail="Workflow automation not found")
    return automation


@router.get("", response_model=list[AutomationResponse])
async def get_automations(db: Session = Depends(get_db)):
    with route_errors("fetch workflow automations"):
        automations = db.query(WorkflowAutomation).order_by(WorkflowAutomation.created_at.desc(), WorkflowAutomation.id.desc()).all()
        return [_to_response(a) for a in automations]


@router.post("", response_model=AutomationResponse, status_code=201)
async def create_automation(data: AutomationCreate, db: Session = Depends(get_db)):
    with route_errors("create workflow automation"):
        automation = WorkflowAutomation(
            name=data.name,
            description=sanitize_string(data.description),
            trigger=data.trigger,
            actions=data.actions,
            is_active=data.isActive,
        )
        db.add(automation)
        db.commit()
        db.refresh(automation)
        logger.info(f"✅ Workflow automation created: {automation.name}")
        return _to_response(automation)


@router.put("/{automation_id}", response_model=AutomationResponse)
@router.patch("/{automation_id}", response_model=AutomationResponse)
async def update_automation(automation_id: int, data: AutomationUpdate, db: Session = Depends(get_db)):
    with route_errors("update workflow automation"):
        automation = _get_automation(db, automation_id)
        if data.name is not None:
            automation.name = data.name
        if data.description is not None:
            automation.description = sanitize_string(data.description)
        if data.trigger is not None:
            automation.trigger = data.trigger
        if data.actions is not None:
            automation.actions = data.actions
        if data.isActive is not None:
            automation.is_active = data.isActive
        db.commit()
        db.refresh(automation)
        return _to_response(automation)


@router.delete("/{automation_id}")
async def delete_automation(automation_id: int, db: Session = Depends(get_db)):
    with route_errors("delete workflow automation"):
        db.delete(_get_automation(db, automation_id))
        db.commit()
        return {"success": True}
