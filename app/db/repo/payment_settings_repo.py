from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.payment_settings import PaymentSettings


class PaymentSettingsRepo:
    @staticmethod
    async def get_latest(session: AsyncSession) -> PaymentSettings | None:
        stmt = select(PaymentSettings).order_by(PaymentSettings.version.desc()).limit(1)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_latest_for_update(session: AsyncSession) -> PaymentSettings | None:
        stmt = (
            select(PaymentSettings)
            .order_by(PaymentSettings.version.desc())
            .limit(1)
            .with_for_update()
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def create(session: AsyncSession, *, settings: PaymentSettings) -> PaymentSettings:
        session.add(settings)
        await session.flush()
        return settings
