import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError

from app.core.errors import NotFound, SlugTaken
from app.models.profile import PLAN_FREE, PLAN_LIMITS, Profile
from app.repositories.profile_repository import ProfileRepository
from app.schemas.profile import ProfileUpdate

logger = logging.getLogger(__name__)


class ProfileService:
    def __init__(self, repo: ProfileRepository):
        self.repo = repo

    def get_or_provision(self, user_id: str, email: Optional[str] = None, name: Optional[str] = None) -> Profile:
        """
        Retorna o perfil do usuário autenticado, criando-o no primeiro acesso.
        O cadastro acontece no Supabase; aqui só espelhamos o usuário localmente.
        """
        profile = self.repo.get_by_user_id(user_id)
        if profile:
            return profile

        normalized_email = email.strip().lower() if email else None
        new_profile = Profile(
            user_id=user_id,
            email=normalized_email,
            name=name,
            plan=PLAN_FREE,
            plan_limit=PLAN_LIMITS[PLAN_FREE],
        )
        try:
            profile = self.repo.create(new_profile)
            logger.info(f"Perfil criado para usuário {user_id} ({normalized_email})")
            return profile
        except IntegrityError as e:
            self.repo.db.rollback()
            # Outra requisição pode ter criado o perfil ao mesmo tempo
            profile = self.repo.get_by_user_id(user_id)
            if not profile:
                logger.error(f"Falha ao criar perfil local para {user_id}: {e}")
                raise
            return profile

    def get_public(self, slug: str) -> Profile:
        profile = self.repo.get_by_slug(slug)
        if not profile:
            raise NotFound("Profissional não encontrado")
        return profile

    def update_profile(self, profile: Profile, data: ProfileUpdate) -> Profile:
        changes = data.model_dump(exclude_unset=True)
        slug = changes.get("slug")
        if slug and self.repo.slug_in_use(slug, exclude_user_id=profile.user_id):
            raise SlugTaken()

        for field, value in changes.items():
            setattr(profile, field, value)
        try:
            profile = self.repo.update(profile)
        except IntegrityError:
            # Corrida entre dois perfis escolhendo o mesmo slug
            self.repo.db.rollback()
            raise SlugTaken()
        logger.info(f"Perfil {profile.user_id} atualizado: {sorted(changes.keys())}")
        return profile
