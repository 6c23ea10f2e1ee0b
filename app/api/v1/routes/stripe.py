import asyncio
import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from app.api.v1.dependencies import get_reconciler, get_stripe_webhook_config
from app.core.errors import ReservoError
from app.schemas.subscription import WebhookResponse
from app.services.stripe_service import StripeConfigurationError, StripeWebhookConfig, verify_and_parse_event
from app.services.subscription_service import SubscriptionReconciler

logger = logging.getLogger(__name__)

router = APIRouter(tags=["stripe"])


@router.post("/webhook", response_model=WebhookResponse)
async def stripe_webhook(
    request: Request,
    config: StripeWebhookConfig = Depends(get_stripe_webhook_config),
    reconciler: SubscriptionReconciler = Depends(get_reconciler),
):
    """
    Webhook do Stripe para eventos de assinatura.

    200 para eventos processados ou ignorados (inclusive tipos desconhecidos),
    400 para assinatura/payload inválidos ou usuário não encontrado (o Stripe tenta de novo),
    500 para falhas internas.
    """
    payload = await request.body()
    signature = request.headers.get("stripe-signature")

    try:
        event = verify_and_parse_event(payload, signature, config)
    except StripeConfigurationError as e:
        logger.error(f"Webhook Stripe sem configuração: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Erro de configuração do webhook"},
        )

    event_type = event["type"]
    logger.info(f"Webhook Stripe recebido: {event_type} ({event.get('id')})")

    try:
        result = await asyncio.to_thread(reconciler.handle_event, event)
    except ReservoError:
        raise
    except Exception as e:
        logger.error(f"Erro ao processar webhook {event_type}: {e}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Erro ao processar evento"},
        )

    return WebhookResponse(event_type=event_type, status=result["status"], reason=result.get("reason"))
