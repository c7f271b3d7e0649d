from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, and_, delete, literal, or_, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.notification_reads import NotificationRead
from app.db.models.notifications import Notification


def _visible_to(user_id: str):
    return or_(
        and_(Notification.audience == "USER", Notification.user_id == user_id),
        Notification.audience == "ALL",
    )


class NotificationsRepo:
    @staticmethod
    async def create(
        session: AsyncSession,
        *,
        user_id: str | None,
        title: str,
        message: str,
        created_at: datetime,
    ) -> Notification:
        notification = Notification(
            user_id=user_id,
            audience="USER" if user_id is not None else "ALL",
            title=title,
            message=message,
            dedupe_key=None,
            created_at=created_at,
        )
        session.add(notification)
        await session.flush()
        return notification

    @staticmethod
    async def create_once(
        session: AsyncSession,
        *,
        user_id: str,
        title: str,
        message: str,
        dedupe_key: str,
        created_at: datetime,
    ) -> bool:
        stmt = (
            insert(Notification)
            .values(
                user_id=user_id,
                audience="USER",
                title=title,
                message=message,
                dedupe_key=dedupe_key,
                created_at=created_at,
            )
            .on_conflict_do_nothing(index_elements=[Notification.dedupe_key])
            .returning(Notification.id)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def get_by_id(session: AsyncSession, notification_id: int) -> Notification | None:
        return await session.get(Notification, notification_id)

    @staticmethod
    async def delete_by_id(session: AsyncSession, notification_id: int) -> int:
        stmt = (
            delete(Notification)
            .where(Notification.id == notification_id)
            .returning(Notification.id)
        )
        result = await session.execute(stmt)
        return len(list(result.scalars()))

    @staticmethod
    async def delete_for_user(session: AsyncSession, *, user_id: str) -> int:
        stmt = (
            delete(Notification)
            .where(Notification.audience == "USER", Notification.user_id == user_id)
            .returning(Notification.id)
        )
        result = await session.execute(stmt)
        return len(list(result.scalars()))

    @staticmethod
    async def list_for_user(
        session: AsyncSession,
        *,
        user_id: str,
        limit: int,
    ) -> list[tuple[Notification, datetime | None]]:
        stmt = (
            select(Notification, NotificationRead.read_at)
            .outerjoin(
                NotificationRead,
                and_(
                    NotificationRead.notification_id == Notification.id,
                    NotificationRead.user_id == user_id,
                ),
            )
            .where(_visible_to(user_id))
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(max(1, int(limit)))
        )
        result = await session.execute(stmt)
        return [(notification, read_at) for notification, read_at in result.all()]

    @staticmethod
    async def mark_read(
        session: AsyncSession,
        *,
        notification_id: int,
        user_id: str,
        read_at: datetime,
    ) -> bool:
        stmt = (
            insert(NotificationRead)
            .values(notification_id=notification_id, user_id=user_id, read_at=read_at)
            .on_conflict_do_nothing(
                index_elements=[NotificationRead.notification_id, NotificationRead.user_id]
            )
            .returning(NotificationRead.notification_id)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def mark_all_read(session: AsyncSession, *, user_id: str, read_at: datetime) -> int:
        unread = (
            select(
                Notification.id,
                literal(user_id, String(128)),
                literal(read_at, DateTime(timezone=True)),
            )
            .outerjoin(
                NotificationRead,
                and_(
                    NotificationRead.notification_id == Notification.id,
                    NotificationRead.user_id == user_id,
                ),
            )
            .where(_visible_to(user_id), NotificationRead.notification_id.is_(None))
        )
        stmt = (
            insert(NotificationRead)
            .from_select(["notification_id", "user_id", "read_at"], unread)
            .on_conflict_do_nothing(
                index_elements=[NotificationRead.notification_id, NotificationRead.user_id]
            )
            .returning(NotificationRead.notification_id)
        )
        result = await session.execute(stmt)
        return len(list(result.scalars()))
