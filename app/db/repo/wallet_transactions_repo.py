from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.wallet_transactions import WalletTransaction


class WalletTransactionsRepo:
    @staticmethod
    async def get_by_idempotency_key(
        session: AsyncSession,
        idempotency_key: str,
    ) -> WalletTransaction | None:
        stmt = select(WalletTransaction).where(
            WalletTransaction.idempotency_key == idempotency_key
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def create(
        session: AsyncSession,
        *,
        transaction: WalletTransaction,
    ) -> WalletTransaction:
        session.add(transaction)
        await session.flush()
        return transaction

    @staticmethod
    async def list_for_user(
        session: AsyncSession,
        *,
        user_id: str,
        limit: int,
    ) -> list[WalletTransaction]:
        stmt = (
            select(WalletTransaction)
            .where(WalletTransaction.user_id == user_id)
            .order_by(WalletTransaction.created_at.desc(), WalletTransaction.id.desc())
            .limit(max(1, int(limit)))
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())
