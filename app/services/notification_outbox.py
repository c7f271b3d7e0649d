from __future__ import annotations

from datetime import datetime, timedelta

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.outbox_events import OutboxEvent
from app.db.repo.notifications_repo import NotificationsRepo
from app.db.repo.outbox_events_repo import OutboxEventsRepo
from app.db.repo.users_repo import UsersRepo

logger = structlog.get_logger(__name__)

EVENT_USER_NOTIFICATION = "USER_NOTIFICATION"
EVENT_ADMIN_NOTICE = "ADMIN_NOTICE"
OUTBOX_EVENT_TYPES = frozenset({EVENT_USER_NOTIFICATION, EVENT_ADMIN_NOTICE})

RETRY_BASE_DELAY = timedelta(seconds=30)
RETRY_MAX_DELAY = timedelta(hours=1)
LAST_ERROR_MAX_LENGTH = 500


class OutboxPayloadError(ValueError):
    pass


def retry_delay(attempts: int) -> timedelta:
    exponent = max(0, int(attempts) - 1)
    delay = RETRY_BASE_DELAY * (2**min(exponent, 16))
    return min(delay, RETRY_MAX_DELAY)


def _require_text(payload: dict[str, object], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value.strip():
        raise OutboxPayloadError(f"outbox payload is missing '{key}'")
    return value


async def enqueue_user_notification(
    session: AsyncSession,
    *,
    user_id: str,
    title: str,
    message: str,
    now_utc: datetime,
) -> OutboxEvent:
    return await OutboxEventsRepo.create(
        session,
        event_type=EVENT_USER_NOTIFICATION,
        payload={"user_id": user_id, "title": title, "message": message},
        available_at=now_utc,
    )


async def enqueue_admin_notice(
    session: AsyncSession,
    *,
    title: str,
    message: str,
    now_utc: datetime,
) -> OutboxEvent:
    return await OutboxEventsRepo.create(
        session,
        event_type=EVENT_ADMIN_NOTICE,
        payload={"title": title, "message": message},
        available_at=now_utc,
    )


async def _resolve_recipients(
    session: AsyncSession,
    *,
    event_type: str,
    payload: dict[str, object],
) -> list[str]:
    if event_type == EVENT_USER_NOTIFICATION:
        return [_require_text(payload, "user_id")]
    if event_type == EVENT_ADMIN_NOTICE:
        return await UsersRepo.list_admin_ids(session)
    raise OutboxPayloadError(f"unsupported outbox event type '{event_type}'")


async def _deliver(
    session: AsyncSession,
    *,
    event_id: int,
    event_type: str,
    payload: dict[str, object],
    now_utc: datetime,
) -> int:
    title = _require_text(payload, "title")
    message = _require_text(payload, "message")
    recipients = await _resolve_recipients(session, event_type=event_type, payload=payload)
    created = 0
    for user_id in recipients:
        if await NotificationsRepo.create_once(
            session,
            user_id=user_id,
            title=title,
            message=message,
            dedupe_key=f"outbox:{event_id}:{user_id}",
            created_at=now_utc,
        ):
            created += 1
    return created


async def dispatch_due_events(
    session: AsyncSession,
    *,
    now_utc: datetime,
    limit: int,
    max_attempts: int,
) -> dict[str, int]:
    """Deliver due outbox events as notification rows.

    Each event is delivered inside its own savepoint. A failure rolls back only
    that event's rows and schedules a retry with exponential backoff until
    ``max_attempts`` is reached, after which the event is parked as FAILED.
    Deterministic dedupe keys make a redelivered event a no-op.
    """
    events = await OutboxEventsRepo.list_due_for_update(session, now_utc=now_utc, limit=limit)
    claimed = [
        (int(event.id), event.event_type, dict(event.payload), int(event.attempts))
        for event in events
    ]

    dispatched = 0
    retried = 0
    failed = 0
    notifications_created = 0
    for event_id, event_type, payload, attempts in claimed:
        try:
            async with session.begin_nested():
                notifications_created += await _deliver(
                    session,
                    event_id=event_id,
                    event_type=event_type,
                    payload=payload,
                    now_utc=now_utc,
                )
        except Exception as exc:
            next_attempts = attempts + 1
            give_up = next_attempts >= max_attempts
            await OutboxEventsRepo.record_failed_attempt(
                session,
                event_id=event_id,
                attempts=next_attempts,
                last_error=f"{type(exc).__name__}: {exc}"[:LAST_ERROR_MAX_LENGTH],
                available_at=now_utc + retry_delay(next_attempts),
                give_up=give_up,
            )
            logger.warning(
                "outbox_event_delivery_failed",
                event_id=event_id,
                event_type=event_type,
                attempts=next_attempts,
                give_up=give_up,
                error=str(exc),
            )
            if give_up:
                failed += 1
            else:
                retried += 1
            continue

        await OutboxEventsRepo.mark_dispatched(session, event_id=event_id, dispatched_at=now_utc)
        dispatched += 1

    return {
        "claimed": len(claimed),
        "dispatched": dispatched,
        "retried": retried,
        "failed": failed,
        "notifications_created": notifications_created,
    }
