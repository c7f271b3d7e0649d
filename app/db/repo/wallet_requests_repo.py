from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.wallet_requests import WalletRequest


class WalletRequestsRepo:
    @staticmethod
    async def create(session: AsyncSession, *, request: WalletRequest) -> WalletRequest:
        session.add(request)
        await session.flush()
        return request

    @staticmethod
    async def get_by_id(session: AsyncSession, request_id: UUID) -> WalletRequest | None:
        return await session.get(WalletRequest, request_id)

    @staticmethod
    async def get_by_id_for_update(
        session: AsyncSession,
        request_id: UUID,
    ) -> WalletRequest | None:
        stmt = select(WalletRequest).where(WalletRequest.id == request_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_utr(session: AsyncSession, utr: str) -> WalletRequest | None:
        stmt = select(WalletRequest).where(WalletRequest.utr == utr)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_oldest_pending_for_user_before(
        session: AsyncSession,
        *,
        user_id: str,
        created_before: datetime,
    ) -> WalletRequest | None:
        stmt = (
            select(WalletRequest)
            .where(
                WalletRequest.user_id == user_id,
                WalletRequest.status == "PENDING",
                WalletRequest.created_at < created_before,
            )
            .order_by(WalletRequest.created_at.asc())
            .limit(1)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_by_status(
        session: AsyncSession,
        *,
        status: str | None,
        user_id: str | None,
        limit: int,
    ) -> list[WalletRequest]:
        stmt = select(WalletRequest)
        if status is not None:
            stmt = stmt.where(WalletRequest.status == status)
        if user_id is not None:
            stmt = stmt.where(WalletRequest.user_id == user_id)
        stmt = stmt.order_by(WalletRequest.created_at.desc()).limit(max(1, int(limit)))
        result = await session.execute(stmt)
        return list(result.scalars().all())
