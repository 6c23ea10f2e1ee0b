"""
Verificação e parsing dos webhooks do Stripe.

O corpo é validado contra o header Stripe-Signature (t=...,v1=...) com o segredo do
endpoint por stripe.Webhook.construct_event; o evento volta como dict simples para o reconciliador.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import stripe

from app.core.config import Settings
from app.core.errors import SignatureOrParseError

logger = logging.getLogger(__name__)


class StripeConfigurationError(RuntimeError):
    pass


@dataclass(frozen=True)
class StripeWebhookConfig:
    webhook_secret: Optional[str]
    tolerance_seconds: int = 300

    @classmethod
    def from_settings(cls, settings: Settings) -> "StripeWebhookConfig":
        return cls(
            webhook_secret=settings.STRIPE_WEBHOOK_SECRET,
            tolerance_seconds=settings.STRIPE_WEBHOOK_TOLERANCE_SECONDS,
        )


def verify_and_parse_event(payload: bytes, signature: Optional[str], config: StripeWebhookConfig) -> Dict[str, Any]:
    """Retorna o evento como dict ou levanta SignatureOrParseError."""
    if not config.webhook_secret:
        raise StripeConfigurationError("STRIPE_WEBHOOK_SECRET não configurado")
    if not signature:
        logger.warning("Webhook Stripe recebido sem assinatura")
        raise SignatureOrParseError("Assinatura do Stripe ausente")

    try:
        event = stripe.Webhook.construct_event(
            payload,
            signature,
            config.webhook_secret,
            tolerance=config.tolerance_seconds,
        )
    except stripe.SignatureVerificationError as e:
        logger.warning(f"Falha na verificação da assinatura do Stripe: {e}")
        raise SignatureOrParseError()
    except ValueError as e:
        # JSON inválido ou corpo que não é UTF-8
        logger.warning(f"Payload do webhook Stripe inválido: {e}")
        raise SignatureOrParseError("Payload do webhook inválido")

    event = event.to_dict()
    if not isinstance(event.get("type"), str):
        raise SignatureOrParseError("Evento sem tipo")
    data = event.get("data")
    if not isinstance(data, dict) or not isinstance(data.get("object"), dict):
        raise SignatureOrParseError("Evento sem data.object")
    return event
