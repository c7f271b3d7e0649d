from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.tournaments import Tournament
from app.db.repo.entries_repo import EntriesRepo
from app.db.repo.tournament_results_repo import TournamentResultsRepo
from app.db.repo.tournaments_repo import TournamentsRepo
from app.game.tournaments.errors import (
    TournamentHasEntriesError,
    TournamentNotFoundError,
    TournamentValidationError,
)
from app.game.tournaments.internal import build_tournament_snapshot, winner_prizes_to_json
from app.game.tournaments.types import TournamentForm, TournamentSnapshot

logger = structlog.get_logger(__name__)


def _apply_form(tournament: Tournament, form: TournamentForm, *, now_utc: datetime) -> None:
    tournament.title = form.title
    tournament.game_type = form.game_type
    tournament.starts_at = form.starts_at
    tournament.entry_fee = form.entry_fee
    tournament.slots = form.slots
    tournament.prize = form.prize
    tournament.rules = list(form.rules)
    tournament.status = form.status
    tournament.is_mega = form.is_mega
    tournament.image_url = form.image_url
    tournament.room_id = form.room_id
    tournament.room_password = form.room_password
    tournament.winner_prizes = winner_prizes_to_json(form.winner_prizes)
    tournament.updated_at = now_utc


async def create_or_update_tournament(
    session: AsyncSession,
    *,
    form: TournamentForm,
    now_utc: datetime,
    tournament_id: UUID | None = None,
) -> TournamentSnapshot:
    if tournament_id is None:
        tournament = Tournament(id=uuid4(), joined_count=0, created_at=now_utc)
        _apply_form(tournament, form, now_utc=now_utc)
        await TournamentsRepo.create(session, tournament=tournament)
        logger.info("tournament_created", tournament_id=str(tournament.id), status=form.status)
        return build_tournament_snapshot(tournament, viewer_is_admin=True)

    tournament = await TournamentsRepo.get_by_id_for_update(session, tournament_id)
    if tournament is None:
        raise TournamentNotFoundError
    if form.slots < int(tournament.joined_count or 0):
        raise TournamentValidationError("Slots cannot be fewer than players already joined.")
    _apply_form(tournament, form, now_utc=now_utc)
    await session.flush()
    logger.info("tournament_updated", tournament_id=str(tournament.id), status=form.status)
    return build_tournament_snapshot(tournament, viewer_is_admin=True)


async def delete_tournament(session: AsyncSession, *, tournament_id: UUID) -> None:
    tournament = await TournamentsRepo.get_by_id_for_update(session, tournament_id)
    if tournament is None:
        raise TournamentNotFoundError
    if await EntriesRepo.count_for_tournament(session, tournament_id=tournament.id) > 0:
        raise TournamentHasEntriesError
    if await TournamentResultsRepo.get_by_tournament_id(session, tournament.id) is not None:
        raise TournamentHasEntriesError("Tournament has a declared result and cannot be deleted.")
    await TournamentsRepo.delete(session, tournament=tournament)
    logger.info("tournament_deleted", tournament_id=str(tournament_id))
