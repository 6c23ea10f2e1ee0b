from sqlalchemy.orm import declarative_base

# Create declarative base
Base = declarative_base()

# Models are imported in app/models/__init__.py to avoid circular imports

POSTGRES_DDL = [
    "CREATE EXTENSION IF NOT EXISTS btree_gist",
    "CREATE UNIQUE INDEX IF NOT EXISTS profiles_email_lower_key ON profiles (lower(email)) WHERE email IS NOT NULL",
    """
    DO $$
    BEGIN
        IF NOT EXISTS (SELECT 1 FROM pg_constraint WHERE conname = 'bookings_no_overlap_per_professional') THEN
            ALTER TABLE bookings
              ADD CONSTRAINT bookings_no_overlap_per_professional
              EXCLUDE USING gist (
                professional_id WITH =,
                tstzrange(start_at, end_at, '[)') WITH &&
              )
              WHERE (status <> 'cancelled');
        END IF;
    END
    $$;
    """,
]


def init_db():
    """Initialize database tables."""
    # Import engine here to avoid circular import
    from app.db.session import engine
    from sqlalchemy import text
    import time
    import logging

    # Import all models to register them with Base.metadata
    # This must happen before create_all()
    from app.models import Profile, Service, Booking, Payment, Subscription  # noqa: F401

    logger = logging.getLogger(__name__)

    # Retry logic to wait for database to be ready
    max_retries = 30
    retry_delay = 2

    for attempt in range(max_retries):
        try:
            with engine.begin() as conn:
                conn.execute(text("SELECT 1"))
            Base.metadata.create_all(bind=engine)
            if engine.dialect.name == "postgresql":
                with engine.begin() as conn:
                    for statement in POSTGRES_DDL:
                        conn.execute(text(statement))
            logger.info("Database tables created/updated successfully")
            return
        except Exception as e:
            if attempt < max_retries - 1:
                logger.warning(f"Database not ready, retrying in {retry_delay}s... (attempt {attempt + 1}/{max_retries})")
                time.sleep(retry_delay)
            else:
                logger.error(f"Failed to connect to database after {max_retries} attempts: {e}")
                raise
