from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import uuid4

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repo.users_repo import UsersRepo
from app.db.repo.wallet_transactions_repo import WalletTransactionsRepo
from app.economy.wallet.constants import (
    DEFAULT_LIST_LIMIT,
    DIRECTION_CREDIT,
    DIRECTIONS,
    ENTRY_TYPE_ADMIN_ADJUSTMENT,
)
from app.economy.wallet.errors import WalletUserNotFoundError, WalletValidationError
from app.economy.wallet.ledger import apply_balance_change, build_transaction_snapshot
from app.economy.wallet.types import BalanceChangeResult, WalletTransactionSnapshot

logger = structlog.get_logger(__name__)


async def update_wallet_balance(
    session: AsyncSession,
    *,
    user_id: str,
    amount: Decimal,
    direction: str,
    now_utc: datetime,
    idempotency_key: str | None = None,
    actor_id: str | None = None,
) -> BalanceChangeResult:
    if amount <= 0:
        raise WalletValidationError("Amount must be positive.")
    if direction not in DIRECTIONS:
        raise WalletValidationError("Type must be credit or debit.")

    user = await UsersRepo.get_by_id_for_update(session, user_id)
    if user is None:
        raise WalletUserNotFoundError

    is_credit = direction == DIRECTION_CREDIT
    result = await apply_balance_change(
        session,
        user=user,
        amount=amount,
        direction=direction,
        entry_type=ENTRY_TYPE_ADMIN_ADJUSTMENT,
        description="Admin credit" if is_credit else "Admin debit",
        idempotency_key=f"admin:{idempotency_key or uuid4().hex}",
        now_utc=now_utc,
        reference_id=actor_id,
        insufficient_message=None if is_credit else "Insufficient funds for debit.",
    )
    logger.info(
        "wallet_balance_adjusted",
        user_id=user_id,
        direction=direction,
        amount=str(result.amount),
        balance_after=str(result.balance_after),
        actor_id=actor_id,
        idempotent_replay=result.idempotent_replay,
    )
    return result


async def list_wallet_transactions(
    session: AsyncSession,
    *,
    user_id: str,
    limit: int = DEFAULT_LIST_LIMIT,
) -> list[WalletTransactionSnapshot]:
    transactions = await WalletTransactionsRepo.list_for_user(
        session,
        user_id=user_id,
        limit=limit,
    )
    return [build_transaction_snapshot(item) for item in transactions]
