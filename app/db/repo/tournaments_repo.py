from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.tournaments import Tournament


class TournamentsRepo:
    @staticmethod
    async def create(session: AsyncSession, *, tournament: Tournament) -> Tournament:
        session.add(tournament)
        await session.flush()
        return tournament

    @staticmethod
    async def get_by_id(session: AsyncSession, tournament_id: UUID) -> Tournament | None:
        return await session.get(Tournament, tournament_id)

    @staticmethod
    async def get_by_id_for_update(session: AsyncSession, tournament_id: UUID) -> Tournament | None:
        stmt = select(Tournament).where(Tournament.id == tournament_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_visible(
        session: AsyncSession,
        *,
        statuses: tuple[str, ...],
        is_mega: bool | None,
        limit: int,
    ) -> list[Tournament]:
        stmt = select(Tournament).where(Tournament.status.in_(statuses))
        if is_mega is not None:
            stmt = stmt.where(Tournament.is_mega.is_(is_mega))
        stmt = stmt.order_by(
            Tournament.starts_at.desc().nulls_last(),
            Tournament.created_at.desc(),
        ).limit(max(1, int(limit)))
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def delete(session: AsyncSession, *, tournament: Tournament) -> None:
        await session.delete(tournament)
        await session.flush()
