from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.v1.dependencies import get_current_profile
from app.db.session import get_db
from app.models.profile import Profile
from app.repositories.booking_repository import BookingRepository
from app.repositories.subscription_repository import SubscriptionRepository
from app.schemas.subscription import SubscriptionStatusResponse
from app.services.subscription_service import SubscriptionService

router = APIRouter(tags=["subscription"])


@router.get("/status", response_model=SubscriptionStatusResponse)
def get_subscription_status(
    current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    """Plano atual, limite e uso do mês do profissional autenticado."""
    subscription_service = SubscriptionService(SubscriptionRepository(db), BookingRepository(db))
    return subscription_service.get_subscription_status(current_profile)
