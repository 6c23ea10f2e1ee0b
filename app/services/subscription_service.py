import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

from sqlalchemy.exc import IntegrityError

from app.core.config import Settings
from app.core.errors import UnresolvedAccount
from app.models.profile import PLAN_FREE, PLAN_LIMITS, PLAN_PREMIUM, PLAN_PROFESSIONAL, Profile
from app.models.subscription import SUB_ACTIVE, SUB_CANCELLED, SUB_PAST_DUE, Subscription
from app.repositories.booking_repository import BookingRepository
from app.repositories.profile_repository import ProfileRepository
from app.repositories.subscription_repository import SubscriptionRepository
from app.utils.dates import month_bounds

logger = logging.getLogger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"
INVOICE_PAYMENT_SUCCEEDED = "invoice.payment_succeeded"
INVOICE_PAYMENT_FAILED = "invoice.payment_failed"
SUBSCRIPTION_DELETED = "customer.subscription.deleted"


@dataclass(frozen=True)
class PlanPolicy:
    premium_price_cents: int = 3790
    period_days: int = 30

    @classmethod
    def from_settings(cls, settings: Settings) -> "PlanPolicy":
        return cls(
            premium_price_cents=settings.PREMIUM_PRICE_CENTS,
            period_days=settings.SUBSCRIPTION_PERIOD_DAYS,
        )

    def classify(self, amount_total: Optional[int]) -> str:
        if amount_total == self.premium_price_cents:
            return PLAN_PREMIUM
        return PLAN_PROFESSIONAL


def _result(status: str, reason: Optional[str] = None) -> Dict[str, Any]:
    return {"status": status, "reason": reason}


def _invoice_subscription_id(invoice: Dict[str, Any]) -> Optional[str]:
    subscription_id = invoice.get("subscription")
    if subscription_id:
        return subscription_id
    # API mais recente do Stripe move o id para parent.subscription_details
    parent = invoice.get("parent") or {}
    details = parent.get("subscription_details") or {}
    return details.get("subscription")


class SubscriptionReconciler:
    """
    Aplica eventos do Stripe ao perfil e à assinatura.

    Estados por stripe_subscription_id: active -> past_due -> cancelled, com
    past_due -> active na renovação. cancelled é final: eventos atrasados não
    reativam a assinatura. Todas as escritas são upserts, então reentregas são seguras.
    """

    def __init__(
        self,
        profile_repo: ProfileRepository,
        subscription_repo: SubscriptionRepository,
        policy: PlanPolicy,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.profile_repo = profile_repo
        self.repo = subscription_repo
        self.policy = policy
        self.now = now
        self.db = subscription_repo.db
        self.handlers = {
            CHECKOUT_COMPLETED: self.handle_checkout_completed,
            INVOICE_PAYMENT_SUCCEEDED: self.handle_invoice_payment_succeeded,
            INVOICE_PAYMENT_FAILED: self.handle_invoice_payment_failed,
            SUBSCRIPTION_DELETED: self.handle_subscription_deleted,
        }

    def handle_event(self, event: Dict[str, Any]) -> Dict[str, Any]:
        event_type = event.get("type", "")
        handler = self.handlers.get(event_type)
        if handler is None:
            logger.info(f"Evento Stripe não tratado: {event_type}")
            return _result("ignored", "unhandled_event_type")

        obj = event["data"]["object"]
        logger.info(f"Processando evento Stripe {event_type} ({event.get('id')}) objeto {obj.get('id')}")
        for attempt in (1, 2):
            try:
                result = handler(obj)
                self.db.commit()
                return result
            except IntegrityError:
                self.db.rollback()
                if attempt == 2:
                    raise
                # Entrega duplicada concorrente inseriu a mesma assinatura; na segunda passada vira update
                logger.info(f"Conflito de unicidade no evento {event.get('id')}; reprocessando")
            except Exception:
                self.db.rollback()
                raise

    # ------------------------------------------------------------------

    def _resolve_profile(self, session: Dict[str, Any]) -> Profile:
        user_id = session.get("client_reference_id")
        details = session.get("customer_details") or {}
        email = details.get("email") or session.get("customer_email")

        profile = None
        if user_id:
            profile = self.profile_repo.get_by_user_id(user_id)
        elif email:
            profile = self.profile_repo.get_by_email(email)

        if not profile:
            logger.warning(f"Checkout {session.get('id')} sem usuário correspondente (ref={user_id}, email={email})")
            raise UnresolvedAccount()
        return profile

    def _apply_plan(self, profile: Profile, plan: str) -> None:
        profile.plan = plan
        profile.plan_limit = PLAN_LIMITS[plan]

    def handle_checkout_completed(self, session: Dict[str, Any]) -> Dict[str, Any]:
        profile = self._resolve_profile(session)

        subscription_id = session.get("subscription")
        if not subscription_id:
            logger.warning(f"Checkout {session.get('id')} sem subscription id; ignorado")
            return _result("ignored", "missing_subscription_id")

        existing = self.repo.get_by_stripe_id(subscription_id)
        if existing and existing.status == SUB_CANCELLED:
            logger.info(f"Checkout repetido para assinatura cancelada {subscription_id}; ignorado")
            return _result("ignored", "subscription_cancelled")
        if existing:
            # Reentrega: status e vigência só mudam por eventos de fatura; apenas o plano do perfil é sincronizado
            self._apply_plan(profile, existing.plan_id)
            logger.info(f"Checkout repetido para assinatura {subscription_id} ({existing.status}); mantida como está")
            return _result("ignored", "subscription_exists")

        plan = self.policy.classify(session.get("amount_total"))
        now = self.now()
        self.repo.upsert(
            stripe_subscription_id=subscription_id,
            user_id=profile.user_id,
            plan_id=plan,
            status=SUB_ACTIVE,
            start_at=now,
            ends_at=now + timedelta(days=self.policy.period_days),
            stripe_customer_id=session.get("customer"),
        )
        self._apply_plan(profile, plan)
        logger.info(f"Perfil {profile.user_id} agora no plano {plan} (assinatura {subscription_id})")
        return _result("processed")

    def _find_subscription(self, subscription_id: Optional[str]) -> Optional[Subscription]:
        if not subscription_id:
            return None
        subscription = self.repo.get_by_stripe_id(subscription_id)
        if not subscription:
            logger.warning(f"Assinatura {subscription_id} não encontrada")
            return None
        return subscription

    def handle_invoice_payment_succeeded(self, invoice: Dict[str, Any]) -> Dict[str, Any]:
        subscription = self._find_subscription(_invoice_subscription_id(invoice))
        if not subscription:
            return _result("ignored", "subscription_not_found")
        if subscription.status == SUB_CANCELLED:
            return _result("ignored", "subscription_cancelled")

        subscription.status = SUB_ACTIVE
        subscription.ends_at = self.now() + timedelta(days=self.policy.period_days)
        logger.info(f"Assinatura {subscription.stripe_subscription_id} renovada até {subscription.ends_at}")
        return _result("processed")

    def handle_invoice_payment_failed(self, invoice: Dict[str, Any]) -> Dict[str, Any]:
        subscription = self._find_subscription(_invoice_subscription_id(invoice))
        if not subscription:
            return _result("ignored", "subscription_not_found")
        if subscription.status == SUB_CANCELLED:
            return _result("ignored", "subscription_cancelled")

        # Sem downgrade do plano aqui; só a exclusão da assinatura volta o perfil ao free
        subscription.status = SUB_PAST_DUE
        logger.info(f"Assinatura {subscription.stripe_subscription_id} marcada como past_due")
        return _result("processed")

    def handle_subscription_deleted(self, stripe_subscription: Dict[str, Any]) -> Dict[str, Any]:
        subscription = self._find_subscription(stripe_subscription.get("id"))
        if not subscription:
            return _result("ignored", "subscription_not_found")

        subscription.status = SUB_CANCELLED
        profile = self.profile_repo.get_by_user_id(subscription.user_id)
        if profile:
            self._apply_plan(profile, PLAN_FREE)
            logger.info(f"Perfil {profile.user_id} revertido para o plano free")
        return _result("processed")


class SubscriptionService:
    """Leitura do plano para o painel do profissional."""

    def __init__(self, repo: SubscriptionRepository, booking_repo: BookingRepository):
        self.repo = repo
        self.booking_repo = booking_repo

    def get_subscription_status(self, profile: Profile) -> Dict[str, Any]:
        month_start, month_end = month_bounds(datetime.now(timezone.utc))
        used = self.booking_repo.count_active_starting_between(profile.user_id, month_start, month_end)
        subscription = self.repo.get_latest_by_user_id(profile.user_id)
        return {
            "plan": profile.plan,
            "plan_limit": profile.plan_limit,
            "bookings_this_month": used,
            "subscription_status": subscription.status if subscription else None,
            "ends_at": subscription.ends_at if subscription else None,
        }
