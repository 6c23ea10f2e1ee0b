from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base import Base

PLAN_FREE = "free"
PLAN_PROFESSIONAL = "professional"
PLAN_PREMIUM = "premium"

# None = ilimitado
PLAN_LIMITS = {
    PLAN_FREE: 5,
    PLAN_PROFESSIONAL: 30,
    PLAN_PREMIUM: None,
}


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), unique=True, index=True, nullable=False)  # id do usuário no Supabase Auth
    # Índice único em lower(email) é criado em init_db (PostgreSQL)
    email = Column(String(255), unique=True, index=True, nullable=True)
    name = Column(String(255), nullable=True)
    profession = Column(String(255), nullable=True)
    bio = Column(Text, nullable=True)
    phone = Column(String(32), nullable=True)
    pix_key = Column(String(255), nullable=True)
    slug = Column(String(120), unique=True, index=True, nullable=True)
    plan = Column(String(32), nullable=False, default=PLAN_FREE)  # free, professional, premium
    plan_limit = Column(Integer, nullable=True, default=PLAN_LIMITS[PLAN_FREE])
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    services = relationship("Service", back_populates="profile", cascade="all, delete-orphan")
    bookings = relationship("Booking", back_populates="profile", cascade="all, delete-orphan")
    subscriptions = relationship("Subscription", back_populates="profile", cascade="all, delete-orphan")
