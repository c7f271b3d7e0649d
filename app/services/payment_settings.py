from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.payment_settings import PaymentSettings
from app.db.repo.payment_settings_repo import PaymentSettingsRepo
from app.db.repo.users_repo import UsersRepo
from app.services.errors import PaymentSettingsError, PaymentSettingsPermissionError

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class PaymentSettingsSnapshot:
    version: int
    upi_id: str
    qr_image_url: str
    updated_at: datetime | None


async def get_payment_settings(session: AsyncSession) -> PaymentSettingsSnapshot:
    latest = await PaymentSettingsRepo.get_latest(session)
    if latest is None:
        return PaymentSettingsSnapshot(version=0, upi_id="", qr_image_url="", updated_at=None)
    return PaymentSettingsSnapshot(
        version=int(latest.version),
        upi_id=latest.upi_id,
        qr_image_url=latest.qr_image_url,
        updated_at=latest.created_at,
    )


async def update_payment_settings(
    session: AsyncSession,
    *,
    upi_id: str,
    qr_image_url: str,
    actor_id: str,
    now_utc: datetime,
) -> PaymentSettingsSnapshot:
    actor = await UsersRepo.get_by_id(session, actor_id)
    if actor is None or actor.role != "ADMIN":
        raise PaymentSettingsPermissionError

    latest = await PaymentSettingsRepo.get_latest_for_update(session)
    next_version = 1 if latest is None else int(latest.version) + 1
    row = PaymentSettings(
        version=next_version,
        upi_id=upi_id.strip(),
        qr_image_url=qr_image_url.strip(),
        updated_by=actor_id,
        created_at=now_utc,
    )
    try:
        async with session.begin_nested():
            await PaymentSettingsRepo.create(session, settings=row)
    except IntegrityError as exc:
        raise PaymentSettingsError(
            "Payment settings were changed by someone else. Please retry."
        ) from exc

    logger.info("payment_settings_updated", version=next_version, actor_id=actor_id)
    return PaymentSettingsSnapshot(
        version=next_version,
        upi_id=row.upi_id,
        qr_image_url=row.qr_image_url,
        updated_at=now_utc,
    )
