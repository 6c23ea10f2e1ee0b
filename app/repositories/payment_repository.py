from typing import Optional

from sqlalchemy.orm import Session

from app.models.payment import Payment


class PaymentRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_booking_id(self, booking_id: int) -> Optional[Payment]:
        return self.db.query(Payment).filter(Payment.booking_id == booking_id).first()

    def add(self, payment: Payment) -> Payment:
        self.db.add(payment)
        self.db.flush()
        return payment
