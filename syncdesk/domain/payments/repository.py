"""Payment repository - Database operations for payments"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Payment


class PaymentRepository:
    """Repository for payment database operations"""

    @staticmethod
    def get_payments(
        db: Session,
        status: Optional[str] = None,
        deal_id: Optional[int] = None,
    ) -> list[Payment]:
        """Get payments ordered by due date"""
        query = db.query(Payment).options(joinedload(Payment.deal))
        if status:
            query = query.filter(Payment.status == status)
        if deal_id:
            query = query.filter(Payment.deal_id == deal_id)
        return query.order_by(Payment.due_date.asc(), Payment.id.asc()).all()

    @staticmethod
    def get_unpaid_payments(db: Session) -> list[Payment]:
        return (
            db.query(Payment)
            .options(joinedload(Payment.deal))
            .filter(Payment.status != "paid")
            .order_by(Payment.due_date.asc())
            .all()
        )

    @staticmethod
    def get_payment_by_id(db: Session, payment_id: int) -> Optional[Payment]:
        return db.query(Payment).filter(Payment.id == payment_id).first()

    @staticmethod
    def create_payment(db: Session, **payment_data) -> Payment:
        """Create a new payment"""
        payment = Payment(**payment_data)
        db.add(payment)
        db.commit()
        db.refresh(payment)
        return payment

    @staticmethod
    def update_payment(db: Session, payment: Payment, **updates) -> Payment:
        """Update a payment with provided fields"""
        for key, value in updates.items():
            if value is not None and hasattr(payment, key):
                setattr(payment, key, value)

        db.commit()
        db.refresh(payment)
        return payment

    @staticmethod
    def delete_payment(db: Session, payment: Payment) -> None:
        db.delete(payment)
        db.commit()
