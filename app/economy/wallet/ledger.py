from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.users import User
from app.db.models.wallet_transactions import WalletTransaction
from app.db.repo.wallet_transactions_repo import WalletTransactionsRepo
from app.economy.wallet.constants import (
    DIRECTION_CREDIT,
    DIRECTIONS,
    TRANSACTION_STATUS_SUCCESS,
)
from app.economy.wallet.errors import (
    InsufficientBalanceError,
    WalletIdempotencyConflictError,
    WalletValidationError,
)
from app.economy.wallet.money import to_money
from app.economy.wallet.types import BalanceChangeResult, WalletTransactionSnapshot


def compute_new_balance(*, current: Decimal, amount: Decimal, direction: str) -> Decimal:
    if amount <= 0:
        raise WalletValidationError("Amount must be positive.")
    if direction not in DIRECTIONS:
        raise WalletValidationError("Unknown balance direction.")
    if direction == DIRECTION_CREDIT:
        return to_money(current + amount)
    if current < amount:
        raise InsufficientBalanceError
    return to_money(current - amount)


def build_transaction_snapshot(transaction: WalletTransaction) -> WalletTransactionSnapshot:
    return WalletTransactionSnapshot(
        transaction_id=int(transaction.id),
        user_id=transaction.user_id,
        amount=Decimal(transaction.amount),
        direction=transaction.direction,
        status=transaction.status,
        entry_type=transaction.entry_type,
        description=transaction.description,
        balance_after=Decimal(transaction.balance_after),
        reference_id=transaction.reference_id,
        created_at=transaction.created_at,
    )


async def apply_balance_change(
    session: AsyncSession,
    *,
    user: User,
    amount: Decimal,
    direction: str,
    entry_type: str,
    description: str,
    idempotency_key: str,
    now_utc: datetime,
    reference_id: str | None = None,
    insufficient_message: str | None = None,
) -> BalanceChangeResult:
    """Mutate a locked user's balance and append the matching transaction.

    The caller must hold the row lock on ``user`` (``UsersRepo.get_by_id_for_update``)
    and own the surrounding transaction, so the balance write and its ledger row
    commit or roll back together. Replaying an idempotency key returns the first
    outcome without touching the balance again.
    """
    resolved_amount = to_money(amount)
    existing = await WalletTransactionsRepo.get_by_idempotency_key(session, idempotency_key)
    if existing is not None:
        if (
            existing.user_id != user.id
            or existing.direction != direction
            or Decimal(existing.amount) != resolved_amount
        ):
            raise WalletIdempotencyConflictError
        balance_after = Decimal(existing.balance_after)
        before = (
            balance_after - resolved_amount
            if direction == DIRECTION_CREDIT
            else balance_after + resolved_amount
        )
        return BalanceChangeResult(
            user_id=user.id,
            direction=direction,
            amount=resolved_amount,
            balance_before=before,
            balance_after=balance_after,
            transaction_id=int(existing.id),
            idempotent_replay=True,
        )

    balance_before = to_money(user.wallet_balance or 0)
    try:
        balance_after = compute_new_balance(
            current=balance_before,
            amount=resolved_amount,
            direction=direction,
        )
    except InsufficientBalanceError as exc:
        if insufficient_message is not None:
            raise InsufficientBalanceError(insufficient_message) from exc
        raise

    user.wallet_balance = balance_after
    user.updated_at = now_utc
    transaction = await WalletTransactionsRepo.create(
        session,
        transaction=WalletTransaction(
            user_id=user.id,
            amount=resolved_amount,
            direction=direction,
            status=TRANSACTION_STATUS_SUCCESS,
            entry_type=entry_type,
            description=description,
            balance_after=balance_after,
            idempotency_key=idempotency_key,
            reference_id=reference_id,
            created_at=now_utc,
        ),
    )
    return BalanceChangeResult(
        user_id=user.id,
        direction=direction,
        amount=resolved_amount,
        balance_before=balance_before,
        balance_after=balance_after,
        transaction_id=int(transaction.id),
        idempotent_replay=False,
    )
