from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repo.entries_repo import EntriesRepo
from app.db.repo.tournaments_repo import TournamentsRepo
from app.db.repo.users_repo import UsersRepo
from app.economy.wallet.constants import DIRECTION_DEBIT, ENTRY_TYPE_TOURNAMENT_ENTRY
from app.economy.wallet.errors import InsufficientBalanceError
from app.economy.wallet.ledger import apply_balance_change
from app.economy.wallet.money import to_money
from app.game.tournaments.constants import TOURNAMENT_STATUS_PUBLISHED
from app.game.tournaments.errors import (
    TournamentAlreadyJoinedError,
    TournamentClosedError,
    TournamentFullError,
    TournamentNotFoundError,
    TournamentUserNotFoundError,
)
from app.game.tournaments.types import TournamentJoinResult
from app.services.notification_outbox import enqueue_admin_notice

logger = structlog.get_logger(__name__)


async def join_tournament(
    session: AsyncSession,
    *,
    tournament_id: UUID,
    user_id: str,
    now_utc: datetime,
) -> TournamentJoinResult:
    if await EntriesRepo.get(session, tournament_id=tournament_id, user_id=user_id) is not None:
        raise TournamentAlreadyJoinedError

    tournament = await TournamentsRepo.get_by_id_for_update(session, tournament_id)
    if tournament is None:
        raise TournamentNotFoundError
    user = await UsersRepo.get_by_id_for_update(session, user_id)
    if user is None:
        raise TournamentUserNotFoundError
    if tournament.status != TOURNAMENT_STATUS_PUBLISHED:
        raise TournamentClosedError
    if int(tournament.joined_count or 0) >= int(tournament.slots):
        raise TournamentFullError

    entry_fee = to_money(tournament.entry_fee)
    balance = to_money(user.wallet_balance or 0)
    if balance < entry_fee:
        raise InsufficientBalanceError

    created = await EntriesRepo.create_once(
        session,
        tournament_id=tournament.id,
        user_id=user.id,
        paid_amount=entry_fee,
        created_at=now_utc,
    )
    if not created:
        raise TournamentAlreadyJoinedError

    balance_after: Decimal = balance
    if entry_fee > 0:
        change = await apply_balance_change(
            session,
            user=user,
            amount=entry_fee,
            direction=DIRECTION_DEBIT,
            entry_type=ENTRY_TYPE_TOURNAMENT_ENTRY,
            description=f"Entry for {tournament.title}",
            idempotency_key=f"tournament_entry:{tournament.id}:{user.id}",
            now_utc=now_utc,
            reference_id=str(tournament.id),
        )
        balance_after = change.balance_after

    tournament.joined_count = int(tournament.joined_count or 0) + 1
    tournament.updated_at = now_utc

    player_name = (user.name or "").strip() or user.id
    await enqueue_admin_notice(
        session,
        title="New Tournament Entry",
        message=f"{player_name} joined {tournament.title}.",
        now_utc=now_utc,
    )
    logger.info(
        "tournament_joined",
        tournament_id=str(tournament.id),
        user_id=user.id,
        entry_fee=str(entry_fee),
        joined_count=tournament.joined_count,
    )
    return TournamentJoinResult(
        tournament_id=tournament.id,
        user_id=user.id,
        entry_fee=entry_fee,
        balance_after=balance_after,
        joined_count=int(tournament.joined_count),
    )


async def get_join_status(session: AsyncSession, *, tournament_id: UUID, user_id: str) -> bool:
    entry = await EntriesRepo.get(session, tournament_id=tournament_id, user_id=user_id)
    return entry is not None
