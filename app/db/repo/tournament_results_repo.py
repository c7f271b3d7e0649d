from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.tournament_results import TournamentResult


class TournamentResultsRepo:
    @staticmethod
    async def get_by_tournament_id(
        session: AsyncSession,
        tournament_id: UUID,
    ) -> TournamentResult | None:
        return await session.get(TournamentResult, tournament_id)

    @staticmethod
    async def create_once(
        session: AsyncSession,
        *,
        tournament_id: UUID,
        tournament_title: str,
        is_mega: bool,
        results: list[dict[str, object]],
        declared_at: datetime,
    ) -> bool:
        stmt = (
            insert(TournamentResult)
            .values(
                tournament_id=tournament_id,
                tournament_title=tournament_title,
                is_mega=is_mega,
                results=results,
                declared_at=declared_at,
            )
            .on_conflict_do_nothing(index_elements=[TournamentResult.tournament_id])
            .returning(TournamentResult.tournament_id)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None
