from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from app.api.actions import ActionResult, run_action
from app.db.session import SessionLocal
from app.services.internal_auth import assert_internal_access
from app.services.payment_settings import get_payment_settings, update_payment_settings
from app.services.user_profiles import UserProfileService

from .action_models import (
    EnsureProfileRequest,
    SetUserRoleRequest,
    UpdatePaymentSettingsRequest,
    UpdateProfileNameRequest,
)

router = APIRouter(
    prefix="/actions",
    tags=["actions", "profile"],
    dependencies=[Depends(assert_internal_access)],
)


@router.post("/profile/ensure", response_model=ActionResult)
async def ensure_profile_action(payload: EnsureProfileRequest) -> ActionResult:
    async def _ensure():
        async with SessionLocal.begin() as session:
            return await UserProfileService.ensure_profile(
                session,
                user_id=payload.user_id,
                name=payload.name,
                email=payload.email,
                photo_url=payload.photo_url,
                now_utc=datetime.now(timezone.utc),
            )

    return await run_action(
        "ensure_user_profile",
        _ensure,
        failure_message="Failed to load profile.",
    )


@router.post("/profile/update-name", response_model=ActionResult)
async def update_profile_name_action(payload: UpdateProfileNameRequest) -> ActionResult:
    async def _update():
        async with SessionLocal.begin() as session:
            return await UserProfileService.update_name(
                session,
                user_id=payload.user_id,
                new_name=payload.new_name,
                now_utc=datetime.now(timezone.utc),
            )

    return await run_action(
        "update_user_profile_name",
        _update,
        failure_message="Failed to update profile.",
    )


@router.post("/profile/set-role", response_model=ActionResult)
async def set_user_role_action(payload: SetUserRoleRequest) -> ActionResult:
    async def _set_role():
        async with SessionLocal.begin() as session:
            return await UserProfileService.set_role(
                session,
                actor_id=payload.actor_id,
                target_user_id=payload.target_user_id,
                role=payload.role,
                now_utc=datetime.now(timezone.utc),
            )

    return await run_action("set_user_role", _set_role, failure_message="Failed to update role.")


@router.post("/payment-settings/get", response_model=ActionResult)
async def get_payment_settings_action() -> ActionResult:
    async def _get():
        async with SessionLocal() as session:
            return await get_payment_settings(session)

    return await run_action(
        "get_payment_settings",
        _get,
        failure_message="Failed to load payment settings.",
    )


@router.post("/payment-settings/update", response_model=ActionResult)
async def update_payment_settings_action(payload: UpdatePaymentSettingsRequest) -> ActionResult:
    async def _update():
        async with SessionLocal.begin() as session:
            return await update_payment_settings(
                session,
                upi_id=payload.upi_id,
                qr_image_url=payload.qr_image_url,
                actor_id=payload.actor_id,
                now_utc=datetime.now(timezone.utc),
            )

    return await run_action(
        "update_payment_settings",
        _update,
        failure_message="Failed to update payment settings.",
    )
