from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.withdrawal_requests import WithdrawalRequest


class WithdrawalRequestsRepo:
    @staticmethod
    async def create(session: AsyncSession, *, request: WithdrawalRequest) -> WithdrawalRequest:
        session.add(request)
        await session.flush()
        return request

    @staticmethod
    async def get_by_id_for_update(
        session: AsyncSession,
        request_id: UUID,
    ) -> WithdrawalRequest | None:
        stmt = (
            select(WithdrawalRequest).where(WithdrawalRequest.id == request_id).with_for_update()
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
    ) -> list[WithdrawalRequest]:
        stmt = select(WithdrawalRequest)
        if status is not None:
            stmt = stmt.where(WithdrawalRequest.status == status)
        if user_id is not None:
            stmt = stmt.where(WithdrawalRequest.user_id == user_id)
        stmt = stmt.order_by(WithdrawalRequest.created_at.desc()).limit(max(1, int(limit)))
        result = await session.execute(stmt)
        return list(result.scalars().all())
