from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from app.api.actions import ActionResult, run_action
from app.db.session import SessionLocal
from app.services.internal_auth import assert_internal_access
from app.services.notifications import (
    delete_user_notification,
    delete_user_notifications,
    list_notifications,
    mark_all_notifications_read,
    mark_notification_read,
    send_notification,
)

from .action_models import (
    DeleteNotificationsRequest,
    NotificationUserRequest,
    SendNotificationRequest,
    UserListRequest,
    UserRequest,
)

router = APIRouter(
    prefix="/actions/notifications",
    tags=["actions", "notifications"],
    dependencies=[Depends(assert_internal_access)],
)


@router.post("/send", response_model=ActionResult)
async def send_notification_action(payload: SendNotificationRequest) -> ActionResult:
    async def _send() -> dict[str, int]:
        async with SessionLocal.begin() as session:
            notification_id = await send_notification(
                session,
                target=payload.target,
                title=payload.title,
                message=payload.message,
                now_utc=datetime.now(timezone.utc),
            )
        return {"notification_id": notification_id}

    return await run_action(
        "send_notification",
        _send,
        failure_message="Failed to send notification.",
    )


@router.post("/delete", response_model=ActionResult)
async def delete_notification_action(payload: NotificationUserRequest) -> ActionResult:
    async def _delete() -> None:
        async with SessionLocal.begin() as session:
            await delete_user_notification(
                session,
                notification_id=payload.notification_id,
                user_id=payload.user_id,
            )

    return await run_action(
        "delete_user_notification",
        _delete,
        failure_message="Failed to delete notification.",
    )


@router.post("/delete-all", response_model=ActionResult)
async def delete_notifications_action(payload: DeleteNotificationsRequest) -> ActionResult:
    async def _delete() -> dict[str, int]:
        async with SessionLocal.begin() as session:
            deleted = await delete_user_notifications(session, user_id=payload.user_id)
        return {"deleted": deleted}

    return await run_action(
        "delete_user_notifications",
        _delete,
        failure_message="Failed to delete notifications.",
    )


@router.post("/read", response_model=ActionResult)
async def mark_notification_read_action(payload: NotificationUserRequest) -> ActionResult:
    async def _read() -> None:
        async with SessionLocal.begin() as session:
            await mark_notification_read(
                session,
                notification_id=payload.notification_id,
                user_id=payload.user_id,
                now_utc=datetime.now(timezone.utc),
            )

    return await run_action(
        "mark_notification_read",
        _read,
        failure_message="Failed to update notification.",
    )


@router.post("/read-all", response_model=ActionResult)
async def mark_all_notifications_read_action(payload: UserRequest) -> ActionResult:
    async def _read_all() -> dict[str, int]:
        async with SessionLocal.begin() as session:
            marked = await mark_all_notifications_read(
                session,
                user_id=payload.user_id,
                now_utc=datetime.now(timezone.utc),
            )
        return {"marked": marked}

    return await run_action(
        "mark_all_notifications_read",
        _read_all,
        failure_message="Failed to update notifications.",
    )


@router.post("/list", response_model=ActionResult)
async def list_notifications_action(payload: UserListRequest) -> ActionResult:
    async def _list():
        async with SessionLocal() as session:
            return await list_notifications(session, user_id=payload.user_id, limit=payload.limit)

    return await run_action(
        "list_notifications",
        _list,
        failure_message="Failed to load notifications.",
    )
