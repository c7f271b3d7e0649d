from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.users import User
from app.db.repo.users_repo import UsersRepo
from app.services.errors import (
    ProfileNotFoundError,
    ProfilePermissionError,
    ProfileValidationError,
)

ROLE_USER = "USER"
ROLE_ADMIN = "ADMIN"
USER_ROLES = frozenset({ROLE_USER, ROLE_ADMIN})
PROFILE_NAME_MAX_LENGTH = 80

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class UserProfileSnapshot:
    user_id: str
    name: str | None
    email: str | None
    photo_url: str | None
    wallet_balance: Decimal
    role: str
    created_now: bool


def _build_snapshot(user: User, *, created_now: bool) -> UserProfileSnapshot:
    return UserProfileSnapshot(
        user_id=user.id,
        name=user.name,
        email=user.email,
        photo_url=user.photo_url,
        wallet_balance=Decimal(user.wallet_balance or 0),
        role=user.role,
        created_now=created_now,
    )


class UserProfileService:
    @staticmethod
    async def ensure_profile(
        session: AsyncSession,
        *,
        user_id: str,
        name: str | None,
        email: str | None,
        photo_url: str | None,
        now_utc: datetime,
    ) -> UserProfileSnapshot:
        resolved_user_id = user_id.strip()
        if not resolved_user_id:
            raise ProfileValidationError("User ID is required.")
        created_now = await UsersRepo.create_once(
            session,
            user_id=resolved_user_id,
            name=(name or "").strip() or None,
            email=(email or "").strip() or None,
            photo_url=(photo_url or "").strip() or None,
            now_utc=now_utc,
        )
        user = await UsersRepo.get_by_id(session, resolved_user_id)
        if user is None:
            raise ProfileNotFoundError
        if created_now:
            logger.info("user_profile_created", user_id=resolved_user_id)
        return _build_snapshot(user, created_now=created_now)

    @staticmethod
    async def update_name(
        session: AsyncSession,
        *,
        user_id: str,
        new_name: str,
        now_utc: datetime,
    ) -> UserProfileSnapshot:
        resolved_name = new_name.strip()
        if not resolved_name:
            raise ProfileValidationError("Name cannot be empty.")
        if len(resolved_name) > PROFILE_NAME_MAX_LENGTH:
            raise ProfileValidationError("Name is too long.")

        user = await UsersRepo.get_by_id_for_update(session, user_id)
        if user is None:
            raise ProfileNotFoundError
        user.name = resolved_name
        user.updated_at = now_utc
        return _build_snapshot(user, created_now=False)

    @staticmethod
    async def set_role(
        session: AsyncSession,
        *,
        actor_id: str,
        target_user_id: str,
        role: str,
        now_utc: datetime,
    ) -> UserProfileSnapshot:
        resolved_role = role.strip().upper()
        if resolved_role not in USER_ROLES:
            raise ProfileValidationError("Role must be user or admin.")
        if actor_id == target_user_id:
            raise ProfilePermissionError("You cannot change your own role.")

        actor = await UsersRepo.get_by_id(session, actor_id)
        if actor is None or actor.role != ROLE_ADMIN:
            raise ProfilePermissionError
        target = await UsersRepo.get_by_id_for_update(session, target_user_id)
        if target is None:
            raise ProfileNotFoundError

        target.role = resolved_role
        target.updated_at = now_utc
        logger.info(
            "user_role_changed",
            actor_id=actor_id,
            target_user_id=target_user_id,
            role=resolved_role,
        )
        return _build_snapshot(target, created_now=False)
