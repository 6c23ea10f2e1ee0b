from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class SubscriptionStatusResponse(BaseModel):
    """Plano atual do profissional e estado da assinatura Stripe."""
    plan: str
    plan_limit: Optional[int] = None  # None = ilimitado
    bookings_this_month: int
    subscription_status: Optional[str] = None
    ends_at: Optional[datetime] = None


class WebhookResponse(BaseModel):
    received: bool = True
    event_type: str
    status: str  # processed, ignored
    reason: Optional[str] = None
