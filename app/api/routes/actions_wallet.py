from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from app.api.actions import ActionResult, run_action
from app.db.session import SessionLocal
from app.economy.wallet.constants import DIRECTION_CREDIT, DIRECTION_DEBIT
from app.economy.wallet.requests import (
    list_wallet_requests,
    list_withdrawal_requests,
    submit_wallet_request,
    submit_withdrawal_request,
    update_wallet_request_status,
    update_withdrawal_request_status,
)
from app.economy.wallet.service import list_wallet_transactions, update_wallet_balance
from app.services.internal_auth import assert_internal_access
from app.services.utr_follow_up import (
    FollowUpRequest,
    get_pending_request_follow_up,
    get_utr_follow_up_message,
)

from .action_models import (
    FollowUpRequestPayload,
    FollowUpResponse,
    RequestListRequest,
    RequestResolutionRequest,
    UserListRequest,
    UserRequest,
    WalletAdjustRequest,
    WalletRequestSubmitRequest,
    WithdrawalSubmitRequest,
)

router = APIRouter(
    prefix="/actions/wallet",
    tags=["actions", "wallet"],
    dependencies=[Depends(assert_internal_access)],
)

_DIRECTION_BY_TYPE = {"credit": DIRECTION_CREDIT, "debit": DIRECTION_DEBIT}


@router.post("/adjust", response_model=ActionResult)
async def update_wallet_balance_action(payload: WalletAdjustRequest) -> ActionResult:
    async def _adjust():
        async with SessionLocal.begin() as session:
            return await update_wallet_balance(
                session,
                user_id=payload.user_id,
                amount=payload.amount,
                direction=_DIRECTION_BY_TYPE[payload.type],
                now_utc=datetime.now(timezone.utc),
                idempotency_key=payload.idempotency_key,
                actor_id=payload.actor_id,
            )

    return await run_action(
        "update_wallet_balance",
        _adjust,
        failure_message="Failed to update wallet balance.",
    )


@router.post("/transactions", response_model=ActionResult)
async def list_wallet_transactions_action(payload: UserListRequest) -> ActionResult:
    async def _list():
        async with SessionLocal() as session:
            return await list_wallet_transactions(
                session,
                user_id=payload.user_id,
                limit=payload.limit,
            )

    return await run_action(
        "list_wallet_transactions",
        _list,
        failure_message="Failed to load transactions.",
    )


@router.post("/requests/submit", response_model=ActionResult)
async def submit_wallet_request_action(payload: WalletRequestSubmitRequest) -> ActionResult:
    async def _submit():
        async with SessionLocal.begin() as session:
            return await submit_wallet_request(
                session,
                user_id=payload.user_id,
                amount=payload.amount,
                utr=payload.utr,
                now_utc=datetime.now(timezone.utc),
            )

    return await run_action(
        "submit_wallet_request",
        _submit,
        failure_message="Failed to submit request.",
    )


@router.post("/requests/resolve", response_model=ActionResult)
async def update_wallet_request_status_action(payload: RequestResolutionRequest) -> ActionResult:
    async def _resolve():
        async with SessionLocal.begin() as session:
            return await update_wallet_request_status(
                session,
                request_id=payload.request_id,
                user_id=payload.user_id,
                amount=payload.amount,
                new_status=payload.new_status.upper(),
                now_utc=datetime.now(timezone.utc),
                actor_id=payload.actor_id,
            )

    return await run_action(
        "update_wallet_request_status",
        _resolve,
        failure_message="Failed to update request status.",
    )


@router.post("/requests/list", response_model=ActionResult)
async def list_wallet_requests_action(payload: RequestListRequest) -> ActionResult:
    async def _list():
        async with SessionLocal() as session:
            return await list_wallet_requests(
                session,
                status=payload.status,
                user_id=payload.user_id,
                limit=payload.limit,
            )

    return await run_action(
        "list_wallet_requests",
        _list,
        failure_message="Failed to load wallet requests.",
    )


@router.post("/withdrawals/submit", response_model=ActionResult)
async def submit_withdrawal_request_action(payload: WithdrawalSubmitRequest) -> ActionResult:
    async def _submit():
        async with SessionLocal.begin() as session:
            return await submit_withdrawal_request(
                session,
                user_id=payload.user_id,
                amount=payload.amount,
                upi_id=payload.upi_id,
                now_utc=datetime.now(timezone.utc),
            )

    return await run_action(
        "submit_withdrawal_request",
        _submit,
        failure_message="Failed to submit withdrawal request.",
    )


@router.post("/withdrawals/resolve", response_model=ActionResult)
async def update_withdrawal_request_status_action(
    payload: RequestResolutionRequest,
) -> ActionResult:
    async def _resolve():
        async with SessionLocal.begin() as session:
            return await update_withdrawal_request_status(
                session,
                request_id=payload.request_id,
                user_id=payload.user_id,
                amount=payload.amount,
                new_status=payload.new_status.upper(),
                now_utc=datetime.now(timezone.utc),
                actor_id=payload.actor_id,
            )

    return await run_action(
        "update_withdrawal_request_status",
        _resolve,
        failure_message="Failed to update withdrawal status.",
    )


@router.post("/withdrawals/list", response_model=ActionResult)
async def list_withdrawal_requests_action(payload: RequestListRequest) -> ActionResult:
    async def _list():
        async with SessionLocal() as session:
            return await list_withdrawal_requests(
                session,
                status=payload.status,
                user_id=payload.user_id,
                limit=payload.limit,
            )

    return await run_action(
        "list_withdrawal_requests",
        _list,
        failure_message="Failed to load withdrawal requests.",
    )


@router.post("/follow-up", response_model=FollowUpResponse)
async def utr_follow_up_action(payload: FollowUpRequestPayload) -> FollowUpResponse:
    message = await get_utr_follow_up_message(
        FollowUpRequest(
            request_id=payload.request_id,
            user_id=payload.user_id,
            amount=payload.amount,
            utr=payload.utr,
            submitted_at=payload.timestamp,
        ),
        now_utc=datetime.now(timezone.utc),
    )
    return FollowUpResponse(follow_up_message=message)


@router.post("/follow-up/pending", response_model=ActionResult)
async def pending_request_follow_up_action(payload: UserRequest) -> ActionResult:
    async def _follow_up() -> dict[str, str | None]:
        async with SessionLocal() as session:
            message = await get_pending_request_follow_up(
                session,
                user_id=payload.user_id,
                now_utc=datetime.now(timezone.utc),
            )
        return {"follow_up_message": message}

    return await run_action(
        "get_pending_request_follow_up",
        _follow_up,
        failure_message="Failed to check pending requests.",
    )
