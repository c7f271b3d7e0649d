from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repo.notifications_repo import NotificationsRepo
from app.db.repo.users_repo import UsersRepo
from app.services.errors import (
    NotificationNotFoundError,
    NotificationPermissionError,
    NotificationUserNotFoundError,
    NotificationValidationError,
)

BROADCAST_TARGET = "all"
DEFAULT_NOTIFICATION_LIMIT = 100

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class NotificationSnapshot:
    notification_id: int
    title: str
    message: str
    is_broadcast: bool
    is_read: bool
    created_at: datetime


async def _is_admin(session: AsyncSession, user_id: str) -> bool:
    user = await UsersRepo.get_by_id(session, user_id)
    return user is not None and user.role == "ADMIN"


async def send_notification(
    session: AsyncSession,
    *,
    target: str,
    title: str,
    message: str,
    now_utc: datetime,
) -> int:
    resolved_title = title.strip()
    resolved_message = message.strip()
    resolved_target = target.strip()
    if not resolved_title or not resolved_message:
        raise NotificationValidationError
    if not resolved_target:
        raise NotificationValidationError("A target user or 'all' is required.")

    user_id: str | None = None
    if resolved_target.lower() != BROADCAST_TARGET:
        if await UsersRepo.get_by_id(session, resolved_target) is None:
            raise NotificationUserNotFoundError
        user_id = resolved_target

    notification = await NotificationsRepo.create(
        session,
        user_id=user_id,
        title=resolved_title,
        message=resolved_message,
        created_at=now_utc,
    )
    logger.info(
        "notification_sent",
        notification_id=notification.id,
        audience=notification.audience,
        user_id=user_id,
    )
    return int(notification.id)


async def delete_user_notification(
    session: AsyncSession,
    *,
    notification_id: int,
    user_id: str,
) -> None:
    notification = await NotificationsRepo.get_by_id(session, notification_id)
    if notification is None:
        raise NotificationNotFoundError

    if notification.user_id is None:
        if not await _is_admin(session, user_id):
            raise NotificationPermissionError("You cannot delete global announcements.")
    elif notification.user_id != user_id and not await _is_admin(session, user_id):
        raise NotificationPermissionError

    await NotificationsRepo.delete_by_id(session, notification_id)
    logger.info("notification_deleted", notification_id=notification_id, actor_id=user_id)


async def delete_user_notifications(session: AsyncSession, *, user_id: str) -> int:
    if not user_id.strip():
        raise NotificationValidationError("User ID is required.")
    deleted = await NotificationsRepo.delete_for_user(session, user_id=user_id)
    logger.info("notifications_cleared", user_id=user_id, deleted=deleted)
    return deleted


async def mark_notification_read(
    session: AsyncSession,
    *,
    notification_id: int,
    user_id: str,
    now_utc: datetime,
) -> bool:
    notification = await NotificationsRepo.get_by_id(session, notification_id)
    if notification is None:
        raise NotificationNotFoundError
    if notification.user_id is not None and notification.user_id != user_id:
        raise NotificationNotFoundError
    return await NotificationsRepo.mark_read(
        session,
        notification_id=notification_id,
        user_id=user_id,
        read_at=now_utc,
    )


async def mark_all_notifications_read(
    session: AsyncSession,
    *,
    user_id: str,
    now_utc: datetime,
) -> int:
    return await NotificationsRepo.mark_all_read(session, user_id=user_id, read_at=now_utc)


async def list_notifications(
    session: AsyncSession,
    *,
    user_id: str,
    limit: int = DEFAULT_NOTIFICATION_LIMIT,
) -> list[NotificationSnapshot]:
    rows = await NotificationsRepo.list_for_user(session, user_id=user_id, limit=limit)
    return [
        NotificationSnapshot(
            notification_id=int(notification.id),
            title=notification.title,
            message=notification.message,
            is_broadcast=notification.user_id is None,
            is_read=read_at is not None,
            created_at=notification.created_at,
        )
        for notification, read_at in rows
    ]
