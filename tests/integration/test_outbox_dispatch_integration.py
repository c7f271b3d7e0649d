from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy import select

from app.db.models.notifications import Notification
from app.db.models.outbox_events import OutboxEvent
from app.db.session import SessionLocal
from app.services import notification_outbox
from app.services.notification_outbox import (
    dispatch_due_events,
    enqueue_admin_notice,
    enqueue_user_notification,
)
from app.workers.tasks.outbox_dispatch import purge_dispatched_outbox_events_async
from tests.integration.arena_fixtures import NOW_UTC, create_user


async def _dispatch(*, now_utc=NOW_UTC, max_attempts: int = 3) -> dict[str, int]:
    async with SessionLocal.begin() as session:
        return await dispatch_due_events(
            session,
            now_utc=now_utc,
            limit=100,
            max_attempts=max_attempts,
        )


async def _notifications() -> list[Notification]:
    async with SessionLocal() as session:
        result = await session.execute(
            select(Notification).order_by(Notification.user_id.asc(), Notification.id.asc())
        )
        return list(result.scalars().all())


async def _event(event_id: int) -> OutboxEvent:
    async with SessionLocal() as session:
        event = await session.get(OutboxEvent, event_id)
        assert event is not None
        return event


@pytest.mark.asyncio
async def test_dispatch_delivers_user_and_admin_events_once() -> None:
    await create_user("outbox-player")
    await create_user("outbox-admin-1", role="ADMIN")
    await create_user("outbox-admin-2", role="ADMIN")

    async with SessionLocal.begin() as session:
        await enqueue_user_notification(
            session,
            user_id="outbox-player",
            title="Deposit Approved",
            message="Your request to add ₹100 has been approved.",
            now_utc=NOW_UTC,
        )
        await enqueue_admin_notice(
            session,
            title="New Tournament Entry",
            message="outbox-player joined Weekend Cup.",
            now_utc=NOW_UTC,
        )

    first = await _dispatch()
    second = await _dispatch()

    assert first == {
        "claimed": 2,
        "dispatched": 2,
        "retried": 0,
        "failed": 0,
        "notifications_created": 3,
    }
    assert second["claimed"] == 0
    notifications = await _notifications()
    assert [(item.user_id, item.title) for item in notifications] == [
        ("outbox-admin-1", "New Tournament Entry"),
        ("outbox-admin-2", "New Tournament Entry"),
        ("outbox-player", "Deposit Approved"),
    ]
    assert all(item.dedupe_key.startswith("outbox:") for item in notifications)


@pytest.mark.asyncio
async def test_dispatch_skips_events_not_yet_due() -> None:
    await create_user("outbox-later")
    async with SessionLocal.begin() as session:
        event = await enqueue_user_notification(
            session,
            user_id="outbox-later",
            title="Later",
            message="Not yet",
            now_utc=NOW_UTC + timedelta(minutes=5),
        )
        event_id = int(event.id)

    assert (await _dispatch())["claimed"] == 0
    assert (await _event(event_id)).status == "PENDING"

    assert (await _dispatch(now_utc=NOW_UTC + timedelta(minutes=5)))["dispatched"] == 1


@pytest.mark.asyncio
async def test_failed_delivery_backs_off_then_parks_event() -> None:
    async with SessionLocal.begin() as session:
        event = await enqueue_user_notification(
            session,
            user_id="missing-user",
            title="Orphan",
            message="Nobody home",
            now_utc=NOW_UTC,
        )
        event_id = int(event.id)

    first = await _dispatch(max_attempts=2)
    assert first["retried"] == 1
    retried = await _event(event_id)
    assert retried.status == "PENDING"
    assert retried.attempts == 1
    assert retried.available_at == NOW_UTC + notification_outbox.retry_delay(1)
    assert retried.last_error is not None

    second = await _dispatch(now_utc=retried.available_at, max_attempts=2)
    assert second["failed"] == 1
    parked = await _event(event_id)
    assert parked.status == "FAILED"
    assert parked.attempts == 2
    assert await _notifications() == []


@pytest.mark.asyncio
async def test_one_bad_event_does_not_block_the_batch() -> None:
    await create_user("outbox-good")
    async with SessionLocal.begin() as session:
        await enqueue_user_notification(
            session,
            user_id="missing-user",
            title="Orphan",
            message="Nobody home",
            now_utc=NOW_UTC,
        )
        await enqueue_user_notification(
            session,
            user_id="outbox-good",
            title="Hello",
            message="Delivered",
            now_utc=NOW_UTC,
        )

    result = await _dispatch()

    assert result["dispatched"] == 1
    assert result["retried"] == 1
    assert [item.user_id for item in await _notifications()] == ["outbox-good"]


@pytest.mark.asyncio
async def test_purge_removes_only_old_dispatched_events() -> None:
    await create_user("outbox-purge")
    async with SessionLocal.begin() as session:
        old = await enqueue_user_notification(
            session,
            user_id="outbox-purge",
            title="Old",
            message="Old",
            now_utc=NOW_UTC,
        )
        old_id = int(old.id)
    await _dispatch()
    async with SessionLocal.begin() as session:
        fresh = await enqueue_user_notification(
            session,
            user_id="outbox-purge",
            title="Fresh",
            message="Fresh",
            now_utc=NOW_UTC,
        )
        fresh_id = int(fresh.id)

    result = await purge_dispatched_outbox_events_async()

    assert result["rows_deleted"] == 1
    async with SessionLocal() as session:
        assert await session.get(OutboxEvent, old_id) is None
        assert await session.get(OutboxEvent, fresh_id) is not None
