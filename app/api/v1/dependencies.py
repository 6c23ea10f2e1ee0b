from typing import Callable, Optional
import logging
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.core.security import decode_access_token
from app.core.config import settings
from app.db.session import SessionLocal, get_db
from app.models.profile import Profile
from app.repositories.booking_repository import BookingRepository
from app.repositories.payment_repository import PaymentRepository
from app.repositories.profile_repository import ProfileRepository
from app.repositories.service_repository import ServiceRepository
from app.repositories.subscription_repository import SubscriptionRepository
from app.services.booking_service import BookingService
from app.services.notification_service import NotificationConfig, NotificationDispatcher
from app.services.profile_service import ProfileService
from app.services.stripe_service import StripeWebhookConfig
from app.services.subscription_service import PlanPolicy, SubscriptionReconciler

logger = logging.getLogger(__name__)
security = HTTPBearer(auto_error=False)


def get_current_profile(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Profile:
    """Valida o JWT do Supabase e devolve o perfil do profissional (criado no primeiro acesso)."""
    if credentials is None or not credentials.credentials.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token de autenticação não fornecido",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_access_token(credentials.credentials.strip())
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token inválido ou expirado",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload.get("sub")
    if not user_id:
        logger.warning(f"Token sem 'sub'. Payload keys: {list(payload.keys())}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token inválido",
            headers={"WWW-Authenticate": "Bearer"},
        )

    metadata = payload.get("user_metadata") or {}
    return ProfileService(ProfileRepository(db)).get_or_provision(
        user_id=str(user_id),
        email=payload.get("email"),
        name=metadata.get("name") or metadata.get("full_name"),
    )


def get_session_factory() -> Callable[[], Session]:
    """Fábrica de sessões para trabalho fora da requisição (notificações em background)."""
    return SessionLocal


def get_notification_config() -> NotificationConfig:
    return NotificationConfig.from_settings(settings)


def get_stripe_webhook_config() -> StripeWebhookConfig:
    return StripeWebhookConfig.from_settings(settings)


def get_plan_policy() -> PlanPolicy:
    return PlanPolicy.from_settings(settings)


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    return BookingService(
        ProfileRepository(db),
        BookingRepository(db),
        PaymentRepository(db),
        ServiceRepository(db),
    )


def get_reconciler(
    db: Session = Depends(get_db),
    policy: PlanPolicy = Depends(get_plan_policy),
) -> SubscriptionReconciler:
    return SubscriptionReconciler(ProfileRepository(db), SubscriptionRepository(db), policy)


def get_notification_dispatcher(
    db: Session = Depends(get_db),
    config: NotificationConfig = Depends(get_notification_config),
) -> NotificationDispatcher:
    return NotificationDispatcher(BookingRepository(db), config)
