from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.entries import Entry


class EntriesRepo:
    @staticmethod
    async def get(session: AsyncSession, *, tournament_id: UUID, user_id: str) -> Entry | None:
        return await session.get(Entry, (tournament_id, user_id))

    @staticmethod
    async def create_once(
        session: AsyncSession,
        *,
        tournament_id: UUID,
        user_id: str,
        paid_amount: Decimal,
        created_at: datetime,
    ) -> bool:
        stmt = (
            insert(Entry)
            .values(
                tournament_id=tournament_id,
                user_id=user_id,
                status="CONFIRMED",
                paid_amount=paid_amount,
                created_at=created_at,
            )
            .on_conflict_do_nothing(index_elements=[Entry.tournament_id, Entry.user_id])
            .returning(Entry.user_id)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def count_for_tournament(session: AsyncSession, *, tournament_id: UUID) -> int:
        stmt = select(func.count(Entry.user_id)).where(Entry.tournament_id == tournament_id)
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def mark_completed(session: AsyncSession, *, tournament_id: UUID) -> int:
        stmt = (
            update(Entry)
            .where(Entry.tournament_id == tournament_id, Entry.status == "CONFIRMED")
            .values(status="COMPLETED")
            .returning(Entry.user_id)
        )
        result = await session.execute(stmt)
        return len(list(result.scalars()))

    @staticmethod
    async def list_tournament_ids_for_user(session: AsyncSession, *, user_id: str) -> set[UUID]:
        stmt = select(Entry.tournament_id).where(
            Entry.user_id == user_id,
            Entry.status != "CANCELLED",
        )
        result = await session.execute(stmt)
        return set(result.scalars().all())
