from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from app.models.booking import Booking, STATUS_CANCELLED


class BookingRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, booking_id: int, professional_id: Optional[str] = None) -> Optional[Booking]:
        query = self.db.query(Booking).filter(Booking.id == booking_id)
        if professional_id is not None:
            query = query.filter(Booking.professional_id == professional_id)
        return query.first()

    def find_overlapping(self, professional_id: str, start_at: datetime, end_at: datetime) -> List[Booking]:
        """Agendamentos não cancelados que cruzam [start_at, end_at) (intervalo semiaberto)."""
        return (
            self.db.query(Booking)
            .filter(
                Booking.professional_id == professional_id,
                Booking.status != STATUS_CANCELLED,
                Booking.start_at < end_at,
                Booking.end_at > start_at,
            )
            .all()
        )

    def count_active_starting_between(self, professional_id: str, start: datetime, end: datetime) -> int:
        return (
            self.db.query(Booking)
            .filter(
                Booking.professional_id == professional_id,
                Booking.status != STATUS_CANCELLED,
                Booking.start_at >= start,
                Booking.start_at < end,
            )
            .count()
        )

    def list_by_professional(
        self,
        professional_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        status: Optional[str] = None,
    ) -> List[Booking]:
        query = self.db.query(Booking).filter(Booking.professional_id == professional_id)
        if start is not None:
            query = query.filter(Booking.end_at > start)
        if end is not None:
            query = query.filter(Booking.start_at < end)
        if status:
            query = query.filter(Booking.status == status)
        return query.order_by(Booking.start_at.asc(), Booking.id.asc()).all()

    def add(self, booking: Booking) -> Booking:
        self.db.add(booking)
        self.db.flush()
        return booking

    def update(self, booking: Booking) -> Booking:
        self.db.commit()
        self.db.refresh(booking)
        return booking
