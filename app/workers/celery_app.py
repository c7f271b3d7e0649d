from celery import Celery
from celery.signals import setup_logging

from app.core.config import get_settings
from app.core.logging import configure_logging

settings = get_settings()

celery_app = Celery(
    "arena_ace",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["app.workers.tasks.outbox_dispatch"],
)

celery_app.conf.update(
    task_default_queue=settings.celery_default_queue,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_soft_time_limit=settings.celery_task_soft_time_limit_seconds,
    worker_prefetch_multiplier=1,
    task_serializer="json",
    result_serializer="json",
    result_expires=3600,
    accept_content=["json"],
    timezone=settings.app_timezone,
    enable_utc=True,
)


@setup_logging.connect
def configure_worker_logging(**_kwargs) -> None:
    configure_logging(settings.log_level, renderer=settings.log_renderer)


@celery_app.task(name="app.workers.celery_app.ping")
def ping() -> str:
    return "pong"
