from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.users import User


class UsersRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, user_id: str) -> User | None:
        return await session.get(User, user_id)

    @staticmethod
    async def get_by_id_for_update(session: AsyncSession, user_id: str) -> User | None:
        stmt = select(User).where(User.id == user_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_by_ids_for_update(session: AsyncSession, user_ids: Sequence[str]) -> list[User]:
        ids = sorted({str(user_id) for user_id in user_ids})
        if not ids:
            return []
        # Rows are locked in id order.
        stmt = select(User).where(User.id.in_(ids)).order_by(User.id.asc()).with_for_update()
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_admin_ids(session: AsyncSession) -> list[str]:
        stmt = select(User.id).where(User.role == "ADMIN").order_by(User.id.asc())
        result = await session.execute(stmt)
        return [str(user_id) for user_id in result.scalars().all()]

    @staticmethod
    async def create_once(
        session: AsyncSession,
        *,
        user_id: str,
        name: str | None,
        email: str | None,
        photo_url: str | None,
        now_utc: datetime,
    ) -> bool:
        stmt = (
            insert(User)
            .values(
                id=user_id,
                name=name,
                email=email,
                photo_url=photo_url,
                role="USER",
                created_at=now_utc,
                updated_at=now_utc,
            )
            .on_conflict_do_nothing(index_elements=[User.id])
            .returning(User.id)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None
