from __future__ import annotations

from decimal import Decimal

import pytest
from sqlalchemy import text
from sqlalchemy.exc import DBAPIError

from app.db.models.wallet_transactions import WalletTransaction
from app.db.session import SessionLocal
from app.economy.wallet.constants import DIRECTION_CREDIT, DIRECTION_DEBIT
from app.economy.wallet.errors import (
    InsufficientBalanceError,
    WalletIdempotencyConflictError,
    WalletUserNotFoundError,
)
from app.economy.wallet.service import list_wallet_transactions, update_wallet_balance
from tests.integration.arena_fixtures import (
    NOW_UTC,
    create_user,
    fund_user,
    get_balance,
    list_transactions,
    signed_total,
)


async def _adjust(user_id: str, amount: str, direction: str, *, key: str | None = None):
    async with SessionLocal.begin() as session:
        return await update_wallet_balance(
            session,
            user_id=user_id,
            amount=Decimal(amount),
            direction=direction,
            now_utc=NOW_UTC,
            idempotency_key=key,
            actor_id="admin-1",
        )


@pytest.mark.asyncio
async def test_admin_credit_adds_to_balance_with_one_transaction() -> None:
    user_id = await create_user("wallet-credit")
    await fund_user(user_id, "60")

    result = await _adjust(user_id, "50", DIRECTION_CREDIT, key="credit-1")

    assert result.balance_before == Decimal("60.00")
    assert result.balance_after == Decimal("110.00")
    assert result.idempotent_replay is False
    assert await get_balance(user_id) == Decimal("110.00")

    transactions = await list_transactions(user_id)
    assert len(transactions) == 2
    credit = transactions[-1]
    assert credit.direction == "CREDIT"
    assert credit.amount == Decimal("50.00")
    assert credit.status == "SUCCESS"
    assert credit.description == "Admin credit"
    assert credit.balance_after == Decimal("110.00")
    assert signed_total(transactions) == Decimal("110.00")


@pytest.mark.asyncio
async def test_admin_debit_cannot_overdraw() -> None:
    user_id = await create_user("wallet-overdraw")
    await fund_user(user_id, "30")

    with pytest.raises(InsufficientBalanceError, match="Insufficient funds for debit."):
        await _adjust(user_id, "30.01", DIRECTION_DEBIT)

    assert await get_balance(user_id) == Decimal("30.00")
    assert len(await list_transactions(user_id)) == 1

    result = await _adjust(user_id, "30", DIRECTION_DEBIT)
    assert result.balance_after == Decimal("0.00")
    assert signed_total(await list_transactions(user_id)) == Decimal("0.00")


@pytest.mark.asyncio
async def test_replayed_idempotency_key_returns_first_outcome() -> None:
    user_id = await create_user("wallet-replay")

    first = await _adjust(user_id, "25", DIRECTION_CREDIT, key="replay-1")
    second = await _adjust(user_id, "25", DIRECTION_CREDIT, key="replay-1")

    assert first.idempotent_replay is False
    assert second.idempotent_replay is True
    assert second.transaction_id == first.transaction_id
    assert second.balance_after == Decimal("25.00")
    assert await get_balance(user_id) == Decimal("25.00")
    assert len(await list_transactions(user_id)) == 1


@pytest.mark.asyncio
async def test_reused_idempotency_key_with_different_amount_is_rejected() -> None:
    user_id = await create_user("wallet-conflict")
    await _adjust(user_id, "25", DIRECTION_CREDIT, key="conflict-1")

    with pytest.raises(WalletIdempotencyConflictError):
        await _adjust(user_id, "26", DIRECTION_CREDIT, key="conflict-1")

    assert await get_balance(user_id) == Decimal("25.00")


@pytest.mark.asyncio
async def test_adjusting_unknown_user_fails() -> None:
    with pytest.raises(WalletUserNotFoundError):
        await _adjust("ghost", "10", DIRECTION_CREDIT)


@pytest.mark.asyncio
async def test_list_wallet_transactions_returns_newest_first() -> None:
    user_id = await create_user("wallet-history")
    await _adjust(user_id, "10", DIRECTION_CREDIT, key="history-1")
    await _adjust(user_id, "4", DIRECTION_DEBIT, key="history-2")

    async with SessionLocal() as session:
        history = await list_wallet_transactions(session, user_id=user_id, limit=10)

    assert [(item.direction, item.amount) for item in history] == [
        ("DEBIT", Decimal("4.00")),
        ("CREDIT", Decimal("10.00")),
    ]
    assert history[0].balance_after == Decimal("6.00")


@pytest.mark.asyncio
async def test_wallet_transactions_block_orm_mutations() -> None:
    user_id = await create_user("wallet-append-only-orm")
    result = await _adjust(user_id, "7", DIRECTION_CREDIT, key="append-only-orm")

    with pytest.raises(ValueError, match="append-only"):
        async with SessionLocal.begin() as session:
            transaction = await session.get(WalletTransaction, result.transaction_id)
            assert transaction is not None
            transaction.amount = Decimal("99")
            await session.flush()

    with pytest.raises(ValueError, match="append-only"):
        async with SessionLocal.begin() as session:
            transaction = await session.get(WalletTransaction, result.transaction_id)
            assert transaction is not None
            await session.delete(transaction)
            await session.flush()


@pytest.mark.asyncio
async def test_wallet_transactions_block_raw_sql_mutations() -> None:
    user_id = await create_user("wallet-append-only-sql")
    result = await _adjust(user_id, "7", DIRECTION_CREDIT, key="append-only-sql")

    with pytest.raises(DBAPIError):
        async with SessionLocal.begin() as session:
            await session.execute(
                text("UPDATE wallet_transactions SET amount = amount + 1 WHERE id = :id"),
                {"id": result.transaction_id},
            )

    with pytest.raises(DBAPIError):
        async with SessionLocal.begin() as session:
            await session.execute(
                text("DELETE FROM wallet_transactions WHERE id = :id"),
                {"id": result.transaction_id},
            )


@pytest.mark.asyncio
async def test_admin_adjustment_accepts_longest_actor_and_key() -> None:
    user_id = await create_user("wallet-long-actor")
    actor_id = "a" * 128

    async with SessionLocal.begin() as session:
        result = await update_wallet_balance(
            session,
            user_id=user_id,
            amount=Decimal("5"),
            direction=DIRECTION_CREDIT,
            now_utc=NOW_UTC,
            idempotency_key="k" * 96,
            actor_id=actor_id,
        )

    assert result.balance_after == Decimal("5.00")
    transactions = await list_transactions(user_id)
    assert transactions[-1].reference_id == actor_id
    assert transactions[-1].idempotency_key == f"admin:{'k' * 96}"
