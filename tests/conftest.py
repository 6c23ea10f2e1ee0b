"""
Fixtures compartilhadas: SQLite em memória no lugar do PostgreSQL.
Run: pytest -v
"""
import os

from tests.helpers import WEBHOOK_SECRET

# Settings é instanciado no import de app.core.config; o ambiente precisa existir antes
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ["STRIPE_WEBHOOK_SECRET"] = WEBHOOK_SECRET
os.environ.setdefault("N8N_WEBHOOK_URL", "https://n8n.example.com/webhook/reservo")
os.environ["NOTIFICATION_BACKEND"] = "background"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.base import Base
from app.models import Booking, Payment, Profile, Service, Subscription  # noqa: F401
from app.models.profile import PLAN_LIMITS, PLAN_PROFESSIONAL


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_profile(db):
    def _make(user_id="user-ana", slug="dra-ana", plan=PLAN_PROFESSIONAL, **kwargs):
        profile = Profile(
            user_id=user_id,
            slug=slug,
            email=kwargs.pop("email", f"{user_id}@example.com"),
            name=kwargs.pop("name", "Dra. Ana"),
            phone=kwargs.pop("phone", "+5511988887777"),
            pix_key=kwargs.pop("pix_key", "ana@pix.com.br"),
            plan=plan,
            plan_limit=kwargs.pop("plan_limit", PLAN_LIMITS[plan]),
            **kwargs,
        )
        db.add(profile)
        db.commit()
        db.refresh(profile)
        return profile

    return _make


@pytest.fixture
def profile(make_profile):
    return make_profile()
