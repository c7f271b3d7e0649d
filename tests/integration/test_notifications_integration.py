from __future__ import annotations

from datetime import timedelta

import pytest

from app.db.session import SessionLocal
from app.services.errors import (
    NotificationNotFoundError,
    NotificationPermissionError,
    NotificationUserNotFoundError,
    NotificationValidationError,
)
from app.services.notifications import (
    delete_user_notification,
    delete_user_notifications,
    list_notifications,
    mark_all_notifications_read,
    mark_notification_read,
    send_notification,
)
from tests.integration.arena_fixtures import NOW_UTC, create_user


async def _send(target: str, title: str, message: str, *, minutes: int = 0) -> int:
    async with SessionLocal.begin() as session:
        return await send_notification(
            session,
            target=target,
            title=title,
            message=message,
            now_utc=NOW_UTC + timedelta(minutes=minutes),
        )


async def _list(user_id: str):
    async with SessionLocal() as session:
        return await list_notifications(session, user_id=user_id, limit=50)


@pytest.mark.asyncio
async def test_users_see_their_own_and_broadcast_notifications() -> None:
    await create_user("notify-a")
    await create_user("notify-b")
    direct_id = await _send("notify-a", "Welcome", "Hello A", minutes=1)
    broadcast_id = await _send("ALL", "Maintenance", "Back soon", minutes=2)
    await _send("notify-b", "Private", "Only B", minutes=3)

    inbox = await _list("notify-a")

    assert [item.notification_id for item in inbox] == [broadcast_id, direct_id]
    assert [item.is_broadcast for item in inbox] == [True, False]
    assert all(item.is_read is False for item in inbox)


@pytest.mark.asyncio
async def test_send_notification_validates_input() -> None:
    with pytest.raises(NotificationValidationError, match="Title and message are required."):
        await _send("all", "  ", "body")
    with pytest.raises(NotificationValidationError):
        await _send("all", "title", "")
    with pytest.raises(NotificationUserNotFoundError):
        await _send("ghost", "title", "body")


@pytest.mark.asyncio
async def test_read_markers_are_per_user_and_idempotent() -> None:
    await create_user("reader-a")
    await create_user("reader-b")
    broadcast_id = await _send("all", "News", "Season 2", minutes=1)
    direct_id = await _send("reader-a", "Hi", "Direct", minutes=2)

    async with SessionLocal.begin() as session:
        first = await mark_notification_read(
            session,
            notification_id=broadcast_id,
            user_id="reader-a",
            now_utc=NOW_UTC,
        )
        second = await mark_notification_read(
            session,
            notification_id=broadcast_id,
            user_id="reader-a",
            now_utc=NOW_UTC,
        )
    assert (first, second) == (True, False)

    with pytest.raises(NotificationNotFoundError):
        async with SessionLocal.begin() as session:
            await mark_notification_read(
                session,
                notification_id=direct_id,
                user_id="reader-b",
                now_utc=NOW_UTC,
            )

    reader_a = {item.notification_id: item.is_read for item in await _list("reader-a")}
    reader_b = {item.notification_id: item.is_read for item in await _list("reader-b")}
    assert reader_a == {broadcast_id: True, direct_id: False}
    assert reader_b == {broadcast_id: False}

    async with SessionLocal.begin() as session:
        marked = await mark_all_notifications_read(session, user_id="reader-a", now_utc=NOW_UTC)
    assert marked == 1
    assert all(item.is_read for item in await _list("reader-a"))


@pytest.mark.asyncio
async def test_only_owner_or_admin_can_delete_notifications() -> None:
    await create_user("owner")
    await create_user("stranger")
    await create_user("moderator", role="ADMIN")
    direct_id = await _send("owner", "Hi", "Direct")
    broadcast_id = await _send("all", "News", "Everyone")

    with pytest.raises(NotificationPermissionError):
        async with SessionLocal.begin() as session:
            await delete_user_notification(session, notification_id=direct_id, user_id="stranger")
    with pytest.raises(NotificationPermissionError, match="global announcements"):
        async with SessionLocal.begin() as session:
            await delete_user_notification(session, notification_id=broadcast_id, user_id="owner")

    async with SessionLocal.begin() as session:
        await delete_user_notification(session, notification_id=direct_id, user_id="owner")
        await delete_user_notification(
            session,
            notification_id=broadcast_id,
            user_id="moderator",
        )

    assert await _list("owner") == []
    with pytest.raises(NotificationNotFoundError):
        async with SessionLocal.begin() as session:
            await delete_user_notification(session, notification_id=direct_id, user_id="owner")


@pytest.mark.asyncio
async def test_clearing_notifications_keeps_broadcasts() -> None:
    await create_user("clearer")
    await _send("clearer", "One", "1", minutes=1)
    await _send("clearer", "Two", "2", minutes=2)
    broadcast_id = await _send("all", "News", "Everyone", minutes=3)

    async with SessionLocal.begin() as session:
        deleted = await delete_user_notifications(session, user_id="clearer")
        with pytest.raises(NotificationValidationError, match="User ID is required."):
            await delete_user_notifications(session, user_id=" ")

    assert deleted == 2
    assert [item.notification_id for item in await _list("clearer")] == [broadcast_id]
