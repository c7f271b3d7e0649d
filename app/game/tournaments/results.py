from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from decimal import Decimal
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.tournament_results import TournamentResult
from app.db.repo.entries_repo import EntriesRepo
from app.db.repo.notifications_repo import NotificationsRepo
from app.db.repo.tournament_results_repo import TournamentResultsRepo
from app.db.repo.tournaments_repo import TournamentsRepo
from app.db.repo.users_repo import UsersRepo
from app.economy.wallet.constants import DIRECTION_CREDIT, ENTRY_TYPE_PRIZE
from app.economy.wallet.ledger import apply_balance_change
from app.economy.wallet.money import format_rupees
from app.game.tournaments.constants import (
    TOURNAMENT_STATUS_CANCELLED,
    TOURNAMENT_STATUS_COMPLETED,
    TOURNAMENT_STATUS_DRAFT,
)
from app.game.tournaments.errors import (
    ResultAlreadyDeclaredError,
    ResultNotFoundError,
    TournamentClosedError,
    TournamentNotFoundError,
    TournamentUserNotFoundError,
    TournamentValidationError,
)
from app.game.tournaments.internal import winner_prizes_from_json
from app.game.tournaments.ranking import assign_ranks
from app.game.tournaments.types import PlayerScore, RankedPlayer, TournamentResultSnapshot

logger = structlog.get_logger(__name__)


def result_message(*, rank: int, points: int, prize: Decimal) -> str:
    message = f"Congratulations! You secured rank #{rank} with {points} points."
    if prize > 0:
        message += f" You've won {format_rupees(prize)}!"
    return message


def _ranked_to_json(players: Sequence[RankedPlayer]) -> list[dict[str, object]]:
    return [
        {
            "user_id": item.user_id,
            "points": item.points,
            "rank": item.rank,
            "prize": str(item.prize),
        }
        for item in players
    ]


def _ranked_from_json(raw: object) -> tuple[RankedPlayer, ...]:
    if not isinstance(raw, list):
        return ()
    return tuple(
        RankedPlayer(
            user_id=str(item["user_id"]),
            points=int(item["points"]),
            rank=int(item["rank"]),
            prize=Decimal(str(item.get("prize", "0"))),
        )
        for item in raw
        if isinstance(item, dict)
    )


def _build_result_snapshot(result: TournamentResult) -> TournamentResultSnapshot:
    return TournamentResultSnapshot(
        tournament_id=result.tournament_id,
        tournament_title=result.tournament_title,
        is_mega=bool(result.is_mega),
        results=_ranked_from_json(result.results),
        declared_at=result.declared_at,
    )


def _validate_scores(scores: Sequence[PlayerScore]) -> None:
    if not scores:
        raise TournamentValidationError("Results cannot be empty.")
    user_ids = [item.user_id for item in scores]
    if any(not user_id.strip() for user_id in user_ids):
        raise TournamentValidationError("Every result needs a player.")
    if len(set(user_ids)) != len(user_ids):
        raise TournamentValidationError("Each player may appear only once in results.")


async def declare_result(
    session: AsyncSession,
    *,
    tournament_id: UUID,
    title: str,
    is_mega: bool,
    scores: Sequence[PlayerScore],
    now_utc: datetime,
) -> TournamentResultSnapshot:
    _validate_scores(scores)

    tournament = await TournamentsRepo.get_by_id_for_update(session, tournament_id)
    if tournament is None:
        raise TournamentNotFoundError
    if tournament.status == TOURNAMENT_STATUS_CANCELLED:
        raise TournamentClosedError("Results cannot be declared for a cancelled tournament.")
    if tournament.status == TOURNAMENT_STATUS_DRAFT:
        raise TournamentClosedError("Results cannot be declared for a draft tournament.")
    if await TournamentResultsRepo.get_by_tournament_id(session, tournament.id) is not None:
        raise ResultAlreadyDeclaredError

    users = await UsersRepo.list_by_ids_for_update(session, [item.user_id for item in scores])
    users_by_id = {user.id: user for user in users}
    if len(users_by_id) != len(scores):
        raise TournamentUserNotFoundError("One or more players in the results were not found.")

    resolved_title = title.strip() or tournament.title
    ranked = assign_ranks(scores, winner_prizes_from_json(tournament.winner_prizes))
    created = await TournamentResultsRepo.create_once(
        session,
        tournament_id=tournament.id,
        tournament_title=resolved_title,
        is_mega=bool(is_mega),
        results=_ranked_to_json(ranked),
        declared_at=now_utc,
    )
    if not created:
        raise ResultAlreadyDeclaredError

    prizes_paid = Decimal("0")
    for player in ranked:
        if player.prize > 0:
            await apply_balance_change(
                session,
                user=users_by_id[player.user_id],
                amount=player.prize,
                direction=DIRECTION_CREDIT,
                entry_type=ENTRY_TYPE_PRIZE,
                description=f"Prize money for {resolved_title}",
                idempotency_key=f"prize:{tournament.id}:{player.user_id}",
                now_utc=now_utc,
                reference_id=str(tournament.id),
            )
            prizes_paid += player.prize
        await NotificationsRepo.create_once(
            session,
            user_id=player.user_id,
            title=f"Result Declared: {resolved_title}",
            message=result_message(rank=player.rank, points=player.points, prize=player.prize),
            dedupe_key=f"result:{tournament.id}:{player.user_id}",
            created_at=now_utc,
        )

    await EntriesRepo.mark_completed(session, tournament_id=tournament.id)
    tournament.status = TOURNAMENT_STATUS_COMPLETED
    tournament.updated_at = now_utc

    logger.info(
        "tournament_result_declared",
        tournament_id=str(tournament.id),
        players_total=len(ranked),
        prizes_paid=str(prizes_paid),
    )
    return TournamentResultSnapshot(
        tournament_id=tournament.id,
        tournament_title=resolved_title,
        is_mega=bool(is_mega),
        results=tuple(ranked),
        declared_at=now_utc,
    )


async def get_result(session: AsyncSession, *, tournament_id: UUID) -> TournamentResultSnapshot:
    result = await TournamentResultsRepo.get_by_tournament_id(session, tournament_id)
    if result is None:
        raise ResultNotFoundError
    return _build_result_snapshot(result)
