from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

import pytest

from app.db.session import SessionLocal
from app.services.errors import (
    PaymentSettingsPermissionError,
    ProfileNotFoundError,
    ProfilePermissionError,
    ProfileValidationError,
)
from app.services.payment_settings import get_payment_settings, update_payment_settings
from app.services.user_profiles import UserProfileService
from tests.integration.arena_fixtures import NOW_UTC, create_user


async def _ensure(user_id: str, name: str | None = None):
    async with SessionLocal.begin() as session:
        return await UserProfileService.ensure_profile(
            session,
            user_id=user_id,
            name=name,
            email=f"{user_id}@example.com",
            photo_url=None,
            now_utc=NOW_UTC,
        )


async def _set_role(actor_id: str, target_user_id: str, role: str):
    async with SessionLocal.begin() as session:
        return await UserProfileService.set_role(
            session,
            actor_id=actor_id,
            target_user_id=target_user_id,
            role=role,
            now_utc=NOW_UTC,
        )


@pytest.mark.asyncio
async def test_ensure_profile_creates_once_with_zero_balance() -> None:
    first = await _ensure("profile-new", name="  Ravi  ")
    second = await _ensure("profile-new", name="Someone Else")

    assert first.created_now is True
    assert first.name == "Ravi"
    assert first.wallet_balance == Decimal("0")
    assert first.role == "USER"
    assert second.created_now is False
    assert second.name == "Ravi"


@pytest.mark.asyncio
async def test_update_name_trims_and_validates() -> None:
    await _ensure("profile-rename", name="Old")

    async with SessionLocal.begin() as session:
        updated = await UserProfileService.update_name(
            session,
            user_id="profile-rename",
            new_name="  New Name ",
            now_utc=NOW_UTC,
        )
    assert updated.name == "New Name"

    for bad_name in ("   ", "x" * 81):
        with pytest.raises(ProfileValidationError):
            async with SessionLocal.begin() as session:
                await UserProfileService.update_name(
                    session,
                    user_id="profile-rename",
                    new_name=bad_name,
                    now_utc=NOW_UTC,
                )
    with pytest.raises(ProfileNotFoundError):
        async with SessionLocal.begin() as session:
            await UserProfileService.update_name(
                session,
                user_id="ghost",
                new_name="Ghost",
                now_utc=NOW_UTC,
            )


@pytest.mark.asyncio
async def test_only_admins_change_roles_and_never_their_own() -> None:
    await create_user("role-admin", role="ADMIN")
    await create_user("role-player")
    await create_user("role-other")

    promoted = await _set_role("role-admin", "role-player", "admin")
    assert promoted.role == "ADMIN"

    with pytest.raises(ProfilePermissionError, match="your own role"):
        await _set_role("role-admin", "role-admin", "user")
    with pytest.raises(ProfilePermissionError, match="Only admins"):
        await _set_role("role-other", "role-player", "user")
    with pytest.raises(ProfileValidationError):
        await _set_role("role-admin", "role-other", "owner")
    with pytest.raises(ProfileNotFoundError):
        await _set_role("role-admin", "ghost", "admin")


@pytest.mark.asyncio
async def test_payment_settings_default_then_versioned_updates() -> None:
    await create_user("settings-admin", role="ADMIN")
    await create_user("settings-player")

    async with SessionLocal() as session:
        defaults = await get_payment_settings(session)
    assert (defaults.version, defaults.upi_id, defaults.qr_image_url) == (0, "", "")

    async with SessionLocal.begin() as session:
        first = await update_payment_settings(
            session,
            upi_id=" arena@upi ",
            qr_image_url="https://cdn.example.com/qr-1.png",
            actor_id="settings-admin",
            now_utc=NOW_UTC,
        )
    async with SessionLocal.begin() as session:
        second = await update_payment_settings(
            session,
            upi_id="arena2@upi",
            qr_image_url="https://cdn.example.com/qr-2.png",
            actor_id="settings-admin",
            now_utc=NOW_UTC + timedelta(minutes=1),
        )

    assert (first.version, first.upi_id) == (1, "arena@upi")
    assert second.version == 2
    async with SessionLocal() as session:
        latest = await get_payment_settings(session)
    assert (latest.version, latest.upi_id) == (2, "arena2@upi")

    with pytest.raises(PaymentSettingsPermissionError):
        async with SessionLocal.begin() as session:
            await update_payment_settings(
                session,
                upi_id="thief@upi",
                qr_image_url="",
                actor_id="settings-player",
                now_utc=NOW_UTC,
            )
