from __future__ import annotations

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repo.entries_repo import EntriesRepo
from app.db.repo.tournaments_repo import TournamentsRepo
from app.db.repo.users_repo import UsersRepo
from app.game.tournaments.constants import (
    TOURNAMENT_ALL_STATUSES,
    TOURNAMENT_DEFAULT_LIST_LIMIT,
    TOURNAMENT_PLAYER_VISIBLE_STATUSES,
    TOURNAMENT_STATUS_DRAFT,
)
from app.game.tournaments.errors import TournamentNotFoundError
from app.game.tournaments.internal import build_tournament_snapshot
from app.game.tournaments.types import TournamentSnapshot


async def _viewer_is_admin(session: AsyncSession, viewer_id: str | None) -> bool:
    if viewer_id is None:
        return False
    viewer = await UsersRepo.get_by_id(session, viewer_id)
    return viewer is not None and viewer.role == "ADMIN"


async def list_tournaments(
    session: AsyncSession,
    *,
    viewer_id: str | None,
    is_mega: bool | None = None,
    limit: int = TOURNAMENT_DEFAULT_LIST_LIMIT,
) -> list[TournamentSnapshot]:
    viewer_is_admin = await _viewer_is_admin(session, viewer_id)
    tournaments = await TournamentsRepo.list_visible(
        session,
        statuses=TOURNAMENT_ALL_STATUSES if viewer_is_admin else TOURNAMENT_PLAYER_VISIBLE_STATUSES,
        is_mega=is_mega,
        limit=limit,
    )
    joined_ids: set[UUID] = set()
    if viewer_id is not None:
        joined_ids = await EntriesRepo.list_tournament_ids_for_user(session, user_id=viewer_id)
    return [
        build_tournament_snapshot(
            item,
            viewer_joined=item.id in joined_ids,
            viewer_is_admin=viewer_is_admin,
        )
        for item in tournaments
    ]


async def get_tournament(
    session: AsyncSession,
    *,
    tournament_id: UUID,
    viewer_id: str | None,
) -> TournamentSnapshot:
    tournament = await TournamentsRepo.get_by_id(session, tournament_id)
    if tournament is None:
        raise TournamentNotFoundError
    viewer_is_admin = await _viewer_is_admin(session, viewer_id)
    if tournament.status == TOURNAMENT_STATUS_DRAFT and not viewer_is_admin:
        raise TournamentNotFoundError

    viewer_joined = False
    if viewer_id is not None:
        entry = await EntriesRepo.get(session, tournament_id=tournament.id, user_id=viewer_id)
        viewer_joined = entry is not None and entry.status != "CANCELLED"
    return build_tournament_snapshot(
        tournament,
        viewer_joined=viewer_joined,
        viewer_is_admin=viewer_is_admin,
    )
