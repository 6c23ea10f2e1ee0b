import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.models.subscription import Subscription

logger = logging.getLogger(__name__)


class SubscriptionRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_stripe_id(self, stripe_subscription_id: str) -> Optional[Subscription]:
        return (
            self.db.query(Subscription)
            .filter(Subscription.stripe_subscription_id == stripe_subscription_id)
            .first()
        )

    def get_latest_by_user_id(self, user_id: str) -> Optional[Subscription]:
        return (
            self.db.query(Subscription)
            .filter(Subscription.user_id == user_id)
            .order_by(Subscription.created_at.desc(), Subscription.id.desc())
            .first()
        )

    def upsert(
        self,
        stripe_subscription_id: str,
        user_id: str,
        plan_id: str,
        status: str,
        start_at: Optional[datetime] = None,
        ends_at: Optional[datetime] = None,
        stripe_customer_id: Optional[str] = None,
    ) -> Subscription:
        """Insere ou atualiza pela chave natural stripe_subscription_id (sem commit)."""
        subscription = self.get_by_stripe_id(stripe_subscription_id)
        if not subscription:
            subscription = Subscription(
                stripe_subscription_id=stripe_subscription_id,
                user_id=user_id,
                plan_id=plan_id,
                status=status,
                start_at=start_at,
                ends_at=ends_at,
                stripe_customer_id=stripe_customer_id,
            )
            self.db.add(subscription)
        else:
            subscription.user_id = user_id
            subscription.plan_id = plan_id
            subscription.status = status
            if start_at is not None:
                subscription.start_at = start_at
            if ends_at is not None:
                subscription.ends_at = ends_at
            if stripe_customer_id is not None:
                subscription.stripe_customer_id = stripe_customer_id
        self.db.flush()
        return subscription
