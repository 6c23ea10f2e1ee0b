import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from app.api.v1.dependencies import get_booking_service, get_current_profile, get_notification_dispatcher
from app.core.errors import UpstreamDeliveryFailure
from app.models.profile import Profile
from app.schemas.notification import NotificationResendRequest, NotificationResult, TestWebhookResponse
from app.services.booking_service import BookingService
from app.services.notification_service import NotificationDispatcher

logger = logging.getLogger(__name__)

router = APIRouter(tags=["notifications"])


@router.post("/bookings/{booking_id}", response_model=NotificationResult)
def resend_booking_notification(
    booking_id: int,
    body: NotificationResendRequest = NotificationResendRequest(),
    current_profile: Profile = Depends(get_current_profile),
    booking_service: BookingService = Depends(get_booking_service),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    """Reenvia a notificação de um agendamento do profissional (síncrono; 502 se o n8n falhar)."""
    booking_service.get_booking(current_profile.user_id, booking_id)
    payload = dispatcher.deliver(booking_id, body.action)
    return NotificationResult(success=True, message="Notificação enviada", payload=payload)


@router.post("/test", response_model=TestWebhookResponse)
def test_webhook(dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher)):
    """Envia um payload de teste ao n8n e devolve status e corpo da resposta."""
    try:
        result = dispatcher.send_test()
    except UpstreamDeliveryFailure as e:
        logger.error(f"Falha no webhook de teste: {e.message}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "error": e.message,
                "details": "Falha ao enviar webhook de teste para o n8n",
            },
        )

    payload = result.pop("payload")
    return TestWebhookResponse(
        success=True,
        message="Webhook de teste enviado",
        n8nResponse=result,
        payload=payload,
    )
