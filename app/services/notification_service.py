import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

import requests
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.errors import UpstreamDeliveryFailure
from app.models.booking import Booking
from app.repositories.booking_repository import BookingRepository
from app.schemas.notification import NotificationPayload
from app.utils.dates import format_date_br, format_time_br
from app.utils.money import format_brl

logger = logging.getLogger(__name__)

DEFAULT_ACTION = "novo_agendamento"
SENT_MARKER = "[WhatsApp enviado]"


@dataclass(frozen=True)
class NotificationConfig:
    webhook_url: Optional[str]
    timeout_seconds: float = 10.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "NotificationConfig":
        return cls(
            webhook_url=settings.N8N_WEBHOOK_URL,
            timeout_seconds=settings.NOTIFICATION_TIMEOUT_SECONDS,
        )


def build_payload(booking: Booking, action: str = DEFAULT_ACTION) -> NotificationPayload:
    profile = booking.profile
    return NotificationPayload(
        clienteNome=booking.client_name,
        clienteTelefone=booking.client_phone,
        profissionalNome=(profile.name if profile else None) or "",
        profissionalTelefone=(profile.phone if profile else None) or "",
        data=format_date_br(booking.start_at),
        hora=format_time_br(booking.start_at),
        tipo=booking.label,
        preco=format_brl(booking.price_cents),
        action=action or DEFAULT_ACTION,
    )


def build_test_payload(now: Optional[datetime] = None) -> NotificationPayload:
    now = now or datetime.now(timezone.utc)
    return NotificationPayload(
        clienteNome="João Silva - TESTE",
        clienteTelefone="+5511999999999",
        profissionalNome="Dr. Teste",
        profissionalTelefone="+5511888888888",
        data=format_date_br(now),
        hora=format_time_br(now),
        tipo="Consulta de Teste",
        preco=format_brl(15000),
        action="teste_webhook",
    )


class NotificationDispatcher:
    """
    Envia dados do agendamento ao fluxo do n8n (que dispara o WhatsApp).

    Entrega best-effort, no máximo uma vez: falhas viram UpstreamDeliveryFailure
    dentro do dispatcher e são apenas logadas em dispatch().
    """

    def __init__(self, booking_repo: BookingRepository, config: NotificationConfig, http: Any = requests):
        self.booking_repo = booking_repo
        self.config = config
        self.http = http

    def send(self, payload: NotificationPayload) -> requests.Response:
        if not self.config.webhook_url:
            raise UpstreamDeliveryFailure("N8N_WEBHOOK_URL não configurado")
        try:
            response = self.http.post(
                self.config.webhook_url,
                json=payload.model_dump(),
                timeout=self.config.timeout_seconds,
            )
        except requests.RequestException as e:
            raise UpstreamDeliveryFailure(f"Erro ao chamar n8n: {e}")
        return response

    def deliver(self, booking_id: int, action: str = DEFAULT_ACTION) -> NotificationPayload:
        """Envia e marca o agendamento; levanta UpstreamDeliveryFailure em qualquer falha de entrega."""
        booking = self.booking_repo.get_by_id(booking_id)
        if not booking:
            raise UpstreamDeliveryFailure(f"Agendamento {booking_id} não encontrado")

        payload = build_payload(booking, action)
        response = self.send(payload)
        if response.status_code >= 400:
            raise UpstreamDeliveryFailure(f"n8n respondeu {response.status_code}: {response.text[:200]}")

        booking.notes = f"{booking.notes}\n{SENT_MARKER}" if booking.notes else SENT_MARKER
        self.booking_repo.update(booking)
        logger.info(f"Notificação '{payload.action}' enviada para o agendamento {booking_id}")
        return payload

    def dispatch(self, booking_id: int, action: str = DEFAULT_ACTION) -> bool:
        """Nunca levanta exceção: o agendamento já foi criado e não depende da notificação."""
        if not self.config.webhook_url:
            logger.info(f"N8N_WEBHOOK_URL não configurado; notificação do agendamento {booking_id} ignorada")
            return False
        try:
            self.deliver(booking_id, action)
            return True
        except UpstreamDeliveryFailure as e:
            logger.warning(f"Falha ao notificar agendamento {booking_id}: {e.message}")
        except Exception as e:
            logger.error(f"Erro inesperado ao notificar agendamento {booking_id}: {e}", exc_info=True)
        self.booking_repo.db.rollback()
        return False

    def send_test(self) -> Dict[str, Any]:
        """Dispara o payload sintético e devolve a resposta do n8n como veio."""
        payload = build_test_payload()
        logger.info(f"Testando webhook do n8n: {self.config.webhook_url}")
        response = self.send(payload)
        logger.info(f"Resposta do n8n: {response.status_code}")
        return {
            "status": response.status_code,
            "statusText": response.reason,
            "body": response.text,
            "payload": payload,
        }


def run_notification(
    booking_id: int,
    action: str,
    session_factory: Callable[[], Session],
    config: NotificationConfig,
) -> bool:
    """Executa o dispatch com sessão própria (fora do ciclo da requisição)."""
    db = session_factory()
    try:
        return NotificationDispatcher(BookingRepository(db), config).dispatch(booking_id, action)
    finally:
        db.close()
