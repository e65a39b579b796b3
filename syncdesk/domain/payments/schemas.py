"""Payment domain schemas - Pydantic models for validation"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_money

# Stored statuses; "overdue" is derived from the due date and never persisted
PAYMENT_STATUSES = ("pending", "paid")


def _validate_status(v):
    if v is None:
        return v
    status = str(v).strip().lower()
    if status == "overdue":
        return "pending"
    if status not in PAYMENT_STATUSES:
        raise ValueError(f"Invalid status '{v}'. Expected one of: pending, paid")
    return status


class PaymentCreate(BaseModel):
    """Schema for creating a new payment"""

    dealId: Optional[int] = None
    amount: Decimal
    dueDate: datetime
    paidDate: Optional[datetime] = None
    status: str = "pending"
    notes: Optional[str] = None

    @field_validator("amount", mode="before")
    @classmethod
    def validate_amount(cls, v):
        amount = validate_money(v)
        if amount is None:
            raise ValueError("Amount is required")
        return amount

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return _validate_status(v)


class PaymentUpdate(BaseModel):
    """Schema for updating an existing payment"""

    dealId: Optional[int] = None
    amount: Optional[Decimal] = None
    dueDate: Optional[datetime] = None
    paidDate: Optional[datetime] = None
    status: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("amount", mode="before")
    @classmethod
    def validate_amount(cls, v):
        return validate_money(v)

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return _validate_status(v)


class PaymentResponse(BaseModel):
    """Schema for payment response"""

    id: int
    dealId: Optional[int] = None
    projectName: Optional[str] = None
    amount: Decimal
    dueDate: datetime
    paidDate: Optional[datetime] = None
    status: str
    isOverdue: bool
    notes: Optional[str] = None
    createdAt: Optional[datetime] = None


class PaymentSummary(BaseModel):
    totalPaid: Decimal
    totalPending: Decimal
    totalOverdue: Decimal
    overdueCount: int
