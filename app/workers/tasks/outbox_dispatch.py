from __future__ import annotations

from datetime import datetime, timedelta, timezone
from time import perf_counter

import structlog

from app.core.config import get_settings
from app.db.repo.outbox_events_repo import OutboxEventsRepo
from app.db.session import SessionLocal
from app.services.notification_outbox import dispatch_due_events
from app.workers.asyncio_runner import run_async_job
from app.workers.celery_app import celery_app

logger = structlog.get_logger(__name__)

OUTBOX_PURGE_INTERVAL_SECONDS = 3600.0
OUTBOX_PURGE_BATCH_SIZE = 1000
OUTBOX_PURGE_MAX_BATCHES = 50


async def dispatch_outbox_events_async() -> dict[str, int]:
    settings = get_settings()
    started_at = perf_counter()
    async with SessionLocal.begin() as session:
        result = await dispatch_due_events(
            session,
            now_utc=datetime.now(timezone.utc),
            limit=settings.outbox_batch_size,
            max_attempts=settings.outbox_max_attempts,
        )
    logger.info(
        "outbox_dispatch_finished",
        duration_ms=int((perf_counter() - started_at) * 1000),
        **result,
    )
    return result


async def purge_dispatched_outbox_events_async() -> dict[str, object]:
    settings = get_settings()
    cutoff_utc = datetime.now(timezone.utc) - timedelta(days=settings.outbox_retention_days)
    rows_deleted = 0
    batches_executed = 0
    for _ in range(OUTBOX_PURGE_MAX_BATCHES):
        async with SessionLocal.begin() as session:
            deleted = await OutboxEventsRepo.delete_dispatched_before(
                session,
                cutoff_utc=cutoff_utc,
                limit=OUTBOX_PURGE_BATCH_SIZE,
            )
        batches_executed += 1
        rows_deleted += deleted
        if deleted < OUTBOX_PURGE_BATCH_SIZE:
            break

    result: dict[str, object] = {
        "cutoff_utc": cutoff_utc.isoformat(),
        "rows_deleted": rows_deleted,
        "batches_executed": batches_executed,
    }
    logger.info("outbox_purge_finished", **result)
    return result


@celery_app.task(name="app.workers.tasks.outbox_dispatch.dispatch_outbox_events")
def dispatch_outbox_events() -> dict[str, int]:
    return run_async_job(dispatch_outbox_events_async)


@celery_app.task(name="app.workers.tasks.outbox_dispatch.purge_dispatched_outbox_events")
def purge_dispatched_outbox_events() -> dict[str, object]:
    return run_async_job(purge_dispatched_outbox_events_async)


def configure_outbox_schedule(app) -> None:
    settings = get_settings()
    queue = app.conf.task_default_queue
    app.conf.beat_schedule = app.conf.beat_schedule or {}
    app.conf.beat_schedule.update(
        {
            "dispatch-outbox-events": {
                "task": "app.workers.tasks.outbox_dispatch.dispatch_outbox_events",
                "schedule": settings.outbox_dispatch_interval_seconds,
                "options": {"queue": queue},
            },
            "purge-dispatched-outbox-events-hourly": {
                "task": "app.workers.tasks.outbox_dispatch.purge_dispatched_outbox_events",
                "schedule": OUTBOX_PURGE_INTERVAL_SECONDS,
                "options": {"queue": queue},
            },
        }
    )


configure_outbox_schedule(celery_app)
