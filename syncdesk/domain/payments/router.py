"""Payment router - FastAPI endpoints for payment operations"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ...models import Payment
from ...shared.errors import route_errors
from .schemas import PaymentCreate, PaymentResponse, PaymentSummary, PaymentUpdate
from .service import PaymentService, is_overdue

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["Payments"])


def get_payment_service(db: Session = Depends(get_db)) -> PaymentService:
    """Dependency injection for PaymentService"""
    return PaymentService(db)


def _to_response(p: Payment) -> PaymentResponse:
    return PaymentResponse(
        id=p.id,
        dealId=p.deal_id,
        projectName=p.deal.project_name if p.deal else None,
        amount=p.amount,
        dueDate=p.due_date,
        paidDate=p.paid_date,
        status=p.status,
        isOverdue=is_overdue(p),
        notes=p.notes,
        createdAt=p.created_at,
    )


@router.get("", response_model=list[PaymentResponse])
async def get_payments(
    status: Optional[str] = Query(None, description="pending, paid or overdue"),
    dealId: Optional[int] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=500),
    service: PaymentService = Depends(get_payment_service),
):
    with route_errors("fetch payments"):
        return [_to_response(p) for p in service.get_payments(status, dealId, limit)]


@router.get("/summary", response_model=PaymentSummary)
async def get_payment_summary(service: PaymentService = Depends(get_payment_service)):
    """Totals for paid, pending and overdue payments"""
    with route_errors("fetch payment summary"):
        return service.get_summary()


@router.get("/{payment_id}", response_model=PaymentResponse)
async def get_payment(payment_id: int, service: PaymentService = Depends(get_payment_service)):
    with route_errors("fetch payment"):
        return _to_response(service.get_payment(payment_id))


@router.post("", response_model=PaymentResponse)
async def create_payment(data: PaymentCreate, service: PaymentService = Depends(get_payment_service)):
    with route_errors("create payment"):
        return _to_response(service.create_payment(data))


@router.put("/{payment_id}", response_model=PaymentResponse)
@router.patch("/{payment_id}", response_model=PaymentResponse)
async def update_payment(
    payment_id: int,
    data: PaymentUpdate,
    service: PaymentService = Depends(get_payment_service),
):
    with route_errors("update payment"):
        return _to_response(service.update_payment(payment_id, data))


@router.delete("/{payment_id}")
async def delete_payment(payment_id: int, service: PaymentService = Depends(get_payment_service)):
    with route_errors("delete payment"):
        return service.delete_payment(payment_id)
