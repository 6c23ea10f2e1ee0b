from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base import Base

STATUS_PENDING = "pending"
STATUS_CONFIRMED = "confirmed"
STATUS_CANCELLED = "cancelled"

CREATED_BY_PROFESSIONAL = "professional"
CREATED_BY_CLIENT = "client"


class Booking(Base):
    __tablename__ = "bookings"
    # A exclusion constraint (sem sobreposição por profissional) é criada em init_db (PostgreSQL)
    __table_args__ = (
        CheckConstraint("start_at < end_at", name="bookings_time_order"),
        Index("ix_bookings_professional_start", "professional_id", "start_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    professional_id = Column(String(64), ForeignKey("profiles.user_id", ondelete="CASCADE"), nullable=False)
    service_id = Column(Integer, ForeignKey("services.id", ondelete="SET NULL"), nullable=True)
    client_name = Column(String(255), nullable=False)
    client_email = Column(String(255), nullable=True)
    client_phone = Column(String(32), nullable=True)
    start_at = Column(DateTime(timezone=True), nullable=False)
    end_at = Column(DateTime(timezone=True), nullable=False)  # exclusivo
    price_cents = Column(Integer, nullable=False, default=0)
    notes = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default=STATUS_PENDING)  # pending, confirmed, cancelled
    label = Column(String(255), nullable=False, default="Consulta")
    created_by = Column(String(16), nullable=False, default=CREATED_BY_CLIENT)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    profile = relationship("Profile", back_populates="bookings")
    service = relationship("Service")
    payment = relationship("Payment", back_populates="booking", uselist=False, cascade="all, delete-orphan")
