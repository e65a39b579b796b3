"""Payment service - Business logic for payments and overdue tracking"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Payment
from ...utils.sanitization import sanitize_string
from .repository import PaymentRepository
from .schemas import PaymentCreate, PaymentUpdate

logger = logging.getLogger(__name__)

OVERDUE = "overdue"


def is_overdue(payment, now: Optional[datetime] = None) -> bool:
    """A payment is overdue when it is not paid and its due date has passed."""
    if payment.status == "paid" or payment.due_date is None:
        return False

    due = payment.due_date
    if now is None:
        now = datetime.now(timezone.utc) if due.tzinfo else datetime.now()
    elif due.tzinfo and not now.tzinfo:
        now = now.replace(tzinfo=timezone.utc)
    elif now.tzinfo and not due.tzinfo:
        now = now.astimezone(timezone.utc).replace(tzinfo=None)
    return due < now


class PaymentService:
    """Service layer for payment business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = PaymentRepository()

    def get_payments(
        self,
        status: Optional[str] = None,
        deal_id: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> list[Payment]:
        """List payments; status=overdue filters on the derived state"""
        if status == OVERDUE:
            payments = [p for p in self.repo.get_unpaid_payments(self.db) if is_overdue(p)]
            if deal_id:
                payments = [p for p in payments if p.deal_id == deal_id]
        else:
            payments = self.repo.get_payments(self.db, status, deal_id)
        return payments[:limit] if limit else payments

    def get_payment(self, payment_id: int) -> Payment:
        """Get a specific payment"""
        payment = self.repo.get_payment_by_id(self.db, payment_id)
        if not payment:
            raise HTTPException(status_code=404, detail="Payment not found")
        return payment

    def create_payment(self, data: PaymentCreate) -> Payment:
        logger.info(f"📥 Creating payment of {data.amount} for deal {data.dealId}")
        paid_date = data.paidDate
        if data.status == "paid" and paid_date is None:
            paid_date = datetime.now()
        return self.repo.create_payment(
            self.db,
            deal_id=data.dealId,
            amount=data.amount,
            due_date=data.dueDate,
            paid_date=paid_date,
            status=data.status,
            notes=sanitize_string(data.notes),
        )

    def update_payment(self, payment_id: int, data: PaymentUpdate) -> Payment:
        """Update a payment; marking it paid records today as the paid date if none is given"""
        payment = self.get_payment(payment_id)

        updates = {}
        if data.dealId is not None:
            updates["deal_id"] = data.dealId
        if data.amount is not None:
            updates["amount"] = data.amount
        if data.dueDate is not None:
            updates["due_date"] = data.dueDate
        if data.paidDate is not None:
            updates["paid_date"] = data.paidDate
        if data.status is not None:
            updates["status"] = data.status
            if data.status == "paid" and data.paidDate is None and payment.paid_date is None:
                updates["paid_date"] = datetime.now()
        if data.notes is not None:
            updates["notes"] = sanitize_string(data.notes)

        return self.repo.update_payment(self.db, payment, **updates)

    def delete_payment(self, payment_id: int) -> dict:
        payment = self.get_payment(payment_id)
        self.repo.delete_payment(self.db, payment)
        return {"success": True}

    def get_summary(self) -> dict:
        """Totals for paid, outstanding and overdue money"""
        total_paid = Decimal("0")
        total_pending = Decimal("0")
        total_overdue = Decimal("0")
        overdue_count = 0

        for payment in self.repo.get_payments(self.db):
            amount = payment.amount or Decimal("0")
            if payment.status == "paid":
                total_paid += amount
                continue
            total_pending += amount
            if is_overdue(payment):
                total_overdue += amount
                overdue_count += 1

        return {
            "totalPaid": total_paid,
            "totalPending": total_pending,
            "totalOverdue": total_overdue,
            "overdueCount": overdue_count,
        }
