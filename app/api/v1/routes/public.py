"""
Página pública de agendamento (sem autenticação), endereçada pelo slug do profissional.
"""
import logging
from typing import Callable

from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.orm import Session

from app.api.v1.dependencies import get_booking_service, get_notification_config, get_session_factory
from app.db.session import get_db
from app.models.booking import CREATED_BY_CLIENT
from app.repositories.profile_repository import ProfileRepository
from app.repositories.service_repository import ServiceRepository
from app.schemas.booking import BookingResponse, PublicBookingCreate, PublicBookingResponse
from app.schemas.profile import PublicProfileResponse, ServiceResponse
from app.services.booking_service import BookingService
from app.services.catalog_service import CatalogService
from app.services.notification_service import DEFAULT_ACTION, NotificationConfig
from app.services.profile_service import ProfileService
from app.tasks.notification_tasks import enqueue_booking_notification

logger = logging.getLogger(__name__)

router = APIRouter(tags=["public"])


@router.get("/{slug}", response_model=PublicProfileResponse)
def get_public_profile(slug: str, db: Session = Depends(get_db)):
    profile = ProfileService(ProfileRepository(db)).get_public(slug)
    services = CatalogService(ServiceRepository(db)).list_services(profile.user_id, only_active=True)
    return PublicProfileResponse(
        name=profile.name,
        profession=profile.profession,
        bio=profile.bio,
        slug=profile.slug,
        services=[ServiceResponse.model_validate(s) for s in services],
    )


@router.post("/{slug}/bookings", response_model=PublicBookingResponse, status_code=status.HTTP_201_CREATED)
def create_public_booking(
    slug: str,
    payload: PublicBookingCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    service: BookingService = Depends(get_booking_service),
    session_factory: Callable[[], Session] = Depends(get_session_factory),
    notification_config: NotificationConfig = Depends(get_notification_config),
):
    """Cliente agenda pela página pública: agendamento pendente + pagamento pendente."""
    profile = ProfileService(ProfileRepository(db)).get_public(slug)
    booking = service.create_booking(
        profile.user_id,
        payload,
        created_by=CREATED_BY_CLIENT,
        payment_method=payload.payment_method,
    )
    enqueue_booking_notification(background_tasks, booking.id, DEFAULT_ACTION, session_factory, notification_config)
    return PublicBookingResponse(booking=BookingResponse.model_validate(booking), pix_key=profile.pix_key)
