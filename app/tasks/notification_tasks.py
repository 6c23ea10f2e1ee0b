"""
Celery task do dispatcher de notificações (NOTIFICATION_BACKEND=celery).
"""
import logging

from app.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(name="notifications.send_booking_notification", ignore_result=True)
def send_booking_notification(booking_id: int, action: str = "novo_agendamento") -> bool:
    from app.core.config import settings
    from app.db.session import SessionLocal
    from app.services.notification_service import NotificationConfig, run_notification

    logger.info(f"send_booking_notification: booking_id={booking_id}, action={action}")
    return run_notification(booking_id, action, SessionLocal, NotificationConfig.from_settings(settings))


def enqueue_booking_notification(background_tasks, booking_id: int, action: str, session_factory, config) -> None:
    """
    Agenda a notificação para depois da resposta HTTP.
    Com NOTIFICATION_BACKEND=celery vai para o worker; se o broker falhar, cai para BackgroundTasks.
    """
    from app.core.config import settings
    from app.services.notification_service import run_notification

    if settings.NOTIFICATION_BACKEND == "celery":
        try:
            send_booking_notification.delay(booking_id, action)
            return
        except Exception as e:
            logger.warning(f"Falha ao enfileirar notificação do agendamento {booking_id} no Celery: {e}")

    background_tasks.add_task(run_notification, booking_id, action, session_factory, config)
