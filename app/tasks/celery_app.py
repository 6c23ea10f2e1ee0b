from celery import Celery
from app.core.config import settings

# Initialize Celery app
celery_app = Celery(
    "reservo",
    broker=settings.REDIS_URL or "redis://localhost:6379/0",
    backend=settings.REDIS_URL or "redis://localhost:6379/0"
)

# Celery configurations
celery_app.conf.update(
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',
    timezone=settings.TIMEZONE,
    enable_utc=True,
    worker_prefetch_multiplier=1,
    # Notificação é no máximo uma vez: confirma a mensagem antes de executar
    task_acks_late=False,
    task_time_limit=60,
    task_soft_time_limit=45,
)

celery_app.conf.include = [
    "app.tasks.notification_tasks",
]
