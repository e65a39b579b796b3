import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..database import get_db
from ..domain.deals.lifecycle import ACTIVE_STATUSES, STATUS_ORDER, normalize_status
from ..domain.payments.service import is_overdue
from ..models import Deal, Payment, Song
from ..shared.errors import route_errors

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/dashboard", tags=["Dashboard"])

RECENT_ACTIVITY_LIMIT = 10
URGENT_ACTIONS_LIMIT = 10


class ActivityItem(BaseModel):
    id: str
    type: str
    message: str
    timestamp: Optional[datetime] = None
    metadata: dict[str, Any]


class UrgentAction(BaseModel):
    id: str
    type: str
    message: str
    dueDate: Optional[datetime] = None
    metadata: dict[str, Any]


class DashboardMetrics(BaseModel):
    activeDeals: int
    totalRevenue: Decimal
    pendingPayments: Decimal
    totalSongs: int
    dealsByStatus: dict[str, int]
    recentActivity: list[ActivityItem]
    urgentActions: list[UrgentAction]


def _money(value: Decimal) -> str:
    return f"{value:,.2f}"


@router.get("", response_model=DashboardMetrics)
async def get_dashboard_metrics(db: Session = Depends(get_db)):
    """Pipeline, revenue and follow-up overview"""
    with route_errors("fetch dashboard metrics"):
        # Legacy spellings are folded into their canonical status
        deals_by_status = {status.value: 0 for status in STATUS_ORDER}
        for status, count in db.query(Deal.status, func.count(Deal.id)).group_by(Deal.status).all():
            canonical = normalize_status(status)
            key = canonical.value if canonical else status
            deals_by_status[key] = deals_by_status.get(key, 0) + count

        active_deals = sum(deals_by_status[status.value] for status in ACTIVE_STATUSES)

        total_revenue = Decimal("0")
        pending = Decimal("0")
        overdue: list[Payment] = []
        for payment in db.query(Payment).order_by(Payment.due_date.asc()).all():
            if payment.status == "paid":
                total_revenue += payment.amount or Decimal("0")
                continue
            pending += payment.amount or Decimal("0")
            if is_overdue(payment):
                overdue.append(payment)

        recent_deals = (
            db.query(Deal).order_by(Deal.updated_at.desc(), Deal.id.desc()).limit(RECENT_ACTIVITY_LIMIT).all()
        )

        return DashboardMetrics(
            activeDeals=active_deals,
            totalRevenue=total_revenue,
            pendingPayments=pending,
            totalSongs=db.query(func.count(Song.id)).scalar() or 0,
            dealsByStatus=deals_by_status,
            recentActivity=[
                ActivityItem(
                    id=str(deal.id),
                    type="deal",
                    message=f"Deal {deal.status}: {deal.project_name}",
                    timestamp=deal.updated_at,
                    metadata={"dealId": deal.id, "status": deal.status},
                )
                for deal in recent_deals
            ],
            urgentActions=[
                UrgentAction(
                    id=str(payment.id),
                    type="overdue_payment",
                    message=f"Payment overdue: ${_money(payment.amount)}",
                    dueDate=payment.due_date,
                    metadata={"paymentId": payment.id, "dealId": payment.deal_id, "amount": str(payment.amount)},
                )
                for payment in overdue[:URGENT_ACTIONS_LIMIT]
            ],
        )
