from datetime import datetime
from typing import Callable, List, Literal, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.v1.dependencies import (
    get_booking_service,
    get_current_profile,
    get_notification_config,
    get_session_factory,
)
from app.models.booking import CREATED_BY_PROFESSIONAL
from app.models.profile import Profile
from app.schemas.booking import BookingCreate, BookingResponse
from app.services.booking_service import BookingService
from app.services.notification_service import DEFAULT_ACTION, NotificationConfig
from app.tasks.notification_tasks import enqueue_booking_notification

router = APIRouter(tags=["bookings"])


@router.get("", response_model=List[BookingResponse])
def list_bookings(
    start: Optional[datetime] = Query(None, description="Início do intervalo (inclusivo)"),
    end: Optional[datetime] = Query(None, description="Fim do intervalo (exclusivo)"),
    status_filter: Optional[Literal["pending", "confirmed", "cancelled"]] = Query(None, alias="status"),
    current_profile: Profile = Depends(get_current_profile),
    service: BookingService = Depends(get_booking_service),
):
    """Agendamentos do profissional que cruzam [start, end)."""
    return service.list_bookings(current_profile.user_id, start, end, status_filter)


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    payload: BookingCreate,
    background_tasks: BackgroundTasks,
    current_profile: Profile = Depends(get_current_profile),
    service: BookingService = Depends(get_booking_service),
    session_factory: Callable[[], Session] = Depends(get_session_factory),
    notification_config: NotificationConfig = Depends(get_notification_config),
):
    """Agendamento criado pelo profissional: já nasce confirmado e sem pagamento."""
    booking = service.create_booking(current_profile.user_id, payload, created_by=CREATED_BY_PROFESSIONAL)
    enqueue_booking_notification(background_tasks, booking.id, DEFAULT_ACTION, session_factory, notification_config)
    return booking


@router.get("/{booking_id}", response_model=BookingResponse)
def get_booking(
    booking_id: int,
    current_profile: Profile = Depends(get_current_profile),
    service: BookingService = Depends(get_booking_service),
):
    return service.get_booking(current_profile.user_id, booking_id)


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
def cancel_booking(
    booking_id: int,
    current_profile: Profile = Depends(get_current_profile),
    service: BookingService = Depends(get_booking_service),
):
    return service.cancel_booking(current_profile.user_id, booking_id)


@router.post("/{booking_id}/confirm", response_model=BookingResponse)
def confirm_booking(
    booking_id: int,
    current_profile: Profile = Depends(get_current_profile),
    service: BookingService = Depends(get_booking_service),
):
    return service.confirm_booking(current_profile.user_id, booking_id)
