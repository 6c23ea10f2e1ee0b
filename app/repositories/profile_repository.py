from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.profile import Profile


class ProfileRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_user_id(self, user_id: str) -> Optional[Profile]:
        return self.db.query(Profile).filter(Profile.user_id == user_id).first()

    def get_by_user_id_for_update(self, user_id: str) -> Optional[Profile]:
        """Trava a linha do profissional até o fim da transação (serializa agendamentos)."""
        return (
            self.db.query(Profile)
            .filter(Profile.user_id == user_id)
            .with_for_update()
            .first()
        )

    def get_by_email(self, email: str) -> Optional[Profile]:
        if not email:
            return None
        normalized = email.strip().lower()
        # Usa o índice único em lower(email)
        return (
            self.db.query(Profile)
            .filter(func.lower(Profile.email) == normalized)
            .first()
        )

    def get_by_slug(self, slug: str) -> Optional[Profile]:
        if not slug:
            return None
        return self.db.query(Profile).filter(Profile.slug == slug.strip().lower()).first()

    def slug_in_use(self, slug: str, exclude_user_id: Optional[str] = None) -> bool:
        query = self.db.query(Profile.id).filter(Profile.slug == slug)
        if exclude_user_id:
            query = query.filter(Profile.user_id != exclude_user_id)
        return query.first() is not None

    def create(self, profile: Profile) -> Profile:
        self.db.add(profile)
        self.db.commit()
        self.db.refresh(profile)
        return profile

    def update(self, profile: Profile) -> Profile:
        self.db.commit()
        self.db.refresh(profile)
        return profile
