from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.v1.dependencies import get_current_profile
from app.db.session import get_db
from app.models.profile import Profile
from app.repositories.profile_repository import ProfileRepository
from app.schemas.profile import ProfileResponse, ProfileUpdate
from app.services.profile_service import ProfileService

router = APIRouter(tags=["profile"])


@router.get("/me", response_model=ProfileResponse)
def get_my_profile(current_profile: Profile = Depends(get_current_profile)):
    """Perfil do profissional autenticado."""
    return current_profile


@router.put("/me", response_model=ProfileResponse)
def update_my_profile(
    payload: ProfileUpdate,
    current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    """Atualiza dados da tela de configurações. Slug já usado por outro perfil retorna 409."""
    return ProfileService(ProfileRepository(db)).update_profile(current_profile, payload)
