from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.wallet_requests import WalletRequest
from app.db.models.withdrawal_requests import WithdrawalRequest
from app.db.repo.users_repo import UsersRepo
from app.db.repo.wallet_requests_repo import WalletRequestsRepo
from app.db.repo.withdrawal_requests_repo import WithdrawalRequestsRepo
from app.economy.wallet.constants import (
    DEFAULT_LIST_LIMIT,
    DIRECTION_CREDIT,
    DIRECTION_DEBIT,
    ENTRY_TYPE_DEPOSIT,
    ENTRY_TYPE_WITHDRAWAL,
    REQUEST_RESOLUTION_STATUSES,
    REQUEST_STATUS_APPROVED,
    REQUEST_STATUS_PENDING,
    REQUEST_STATUSES,
)
from app.economy.wallet.errors import (
    DuplicateUtrError,
    InsufficientBalanceError,
    WalletRequestAlreadyResolvedError,
    WalletRequestMismatchError,
    WalletRequestNotFoundError,
    WalletUserNotFoundError,
    WalletValidationError,
)
from app.economy.wallet.ledger import apply_balance_change
from app.economy.wallet.money import format_rupees, to_money
from app.economy.wallet.types import (
    RequestResolutionResult,
    WalletRequestSnapshot,
    WithdrawalRequestSnapshot,
)
from app.services.notification_outbox import enqueue_user_notification

logger = structlog.get_logger(__name__)


def _wallet_request_snapshot(request: WalletRequest) -> WalletRequestSnapshot:
    return WalletRequestSnapshot(
        request_id=request.id,
        user_id=request.user_id,
        amount=Decimal(request.amount),
        utr=request.utr,
        status=request.status,
        created_at=request.created_at,
        resolved_at=request.resolved_at,
    )


def _withdrawal_request_snapshot(request: WithdrawalRequest) -> WithdrawalRequestSnapshot:
    return WithdrawalRequestSnapshot(
        request_id=request.id,
        user_id=request.user_id,
        amount=Decimal(request.amount),
        upi_id=request.upi_id,
        status=request.status,
        created_at=request.created_at,
        resolved_at=request.resolved_at,
    )


def _validate_amount(amount: Decimal) -> Decimal:
    resolved = to_money(amount)
    if resolved <= 0:
        raise WalletValidationError("Amount must be positive.")
    return resolved


def _validate_resolution(
    *,
    stored_user_id: str,
    stored_amount: Decimal,
    stored_status: str,
    user_id: str,
    amount: Decimal,
    new_status: str,
) -> None:
    if new_status not in REQUEST_RESOLUTION_STATUSES:
        raise WalletValidationError("Status must be approved or rejected.")
    if stored_user_id != user_id or to_money(stored_amount) != to_money(amount):
        raise WalletRequestMismatchError
    if stored_status != REQUEST_STATUS_PENDING:
        raise WalletRequestAlreadyResolvedError


def _normalize_status_filter(status: str | None) -> str | None:
    if status is None:
        return None
    normalized = status.strip().upper()
    if normalized not in REQUEST_STATUSES:
        raise WalletValidationError("Unknown request status.")
    return normalized


async def submit_wallet_request(
    session: AsyncSession,
    *,
    user_id: str,
    amount: Decimal,
    utr: str,
    now_utc: datetime,
) -> WalletRequestSnapshot:
    resolved_amount = _validate_amount(amount)
    resolved_utr = utr.strip()
    if not resolved_utr:
        raise WalletValidationError("UTR is required.")

    user = await UsersRepo.get_by_id(session, user_id)
    if user is None:
        raise WalletUserNotFoundError
    if await WalletRequestsRepo.get_by_utr(session, resolved_utr) is not None:
        raise DuplicateUtrError

    request = WalletRequest(
        id=uuid4(),
        user_id=user_id,
        amount=resolved_amount,
        utr=resolved_utr,
        status=REQUEST_STATUS_PENDING,
        created_at=now_utc,
        resolved_at=None,
        resolved_by=None,
    )
    try:
        async with session.begin_nested():
            await WalletRequestsRepo.create(session, request=request)
    except IntegrityError as exc:
        raise DuplicateUtrError from exc

    logger.info(
        "wallet_request_submitted",
        request_id=str(request.id),
        user_id=user_id,
        amount=str(resolved_amount),
    )
    return _wallet_request_snapshot(request)


async def submit_withdrawal_request(
    session: AsyncSession,
    *,
    user_id: str,
    amount: Decimal,
    upi_id: str,
    now_utc: datetime,
) -> WithdrawalRequestSnapshot:
    resolved_amount = _validate_amount(amount)
    resolved_upi_id = upi_id.strip()
    if not resolved_upi_id:
        raise WalletValidationError("UPI ID is required.")

    user = await UsersRepo.get_by_id(session, user_id)
    if user is None:
        raise WalletUserNotFoundError
    if to_money(user.wallet_balance or 0) < resolved_amount:
        raise InsufficientBalanceError("Insufficient wallet balance for withdrawal.")

    request = await WithdrawalRequestsRepo.create(
        session,
        request=WithdrawalRequest(
            id=uuid4(),
            user_id=user_id,
            amount=resolved_amount,
            upi_id=resolved_upi_id,
            status=REQUEST_STATUS_PENDING,
            created_at=now_utc,
            resolved_at=None,
            resolved_by=None,
        ),
    )
    logger.info(
        "withdrawal_request_submitted",
        request_id=str(request.id),
        user_id=user_id,
        amount=str(resolved_amount),
    )
    return _withdrawal_request_snapshot(request)


async def update_wallet_request_status(
    session: AsyncSession,
    *,
    request_id: UUID,
    user_id: str,
    amount: Decimal,
    new_status: str,
    now_utc: datetime,
    actor_id: str | None = None,
) -> RequestResolutionResult:
    request = await WalletRequestsRepo.get_by_id_for_update(session, request_id)
    if request is None:
        raise WalletRequestNotFoundError
    _validate_resolution(
        stored_user_id=request.user_id,
        stored_amount=Decimal(request.amount),
        stored_status=request.status,
        user_id=user_id,
        amount=amount,
        new_status=new_status,
    )

    credited_amount = to_money(request.amount)
    balance_after: Decimal | None = None
    if new_status == REQUEST_STATUS_APPROVED:
        user = await UsersRepo.get_by_id_for_update(session, request.user_id)
        if user is None:
            raise WalletUserNotFoundError
        change = await apply_balance_change(
            session,
            user=user,
            amount=credited_amount,
            direction=DIRECTION_CREDIT,
            entry_type=ENTRY_TYPE_DEPOSIT,
            description="Wallet deposit approved",
            idempotency_key=f"wallet_request:{request.id}",
            now_utc=now_utc,
            reference_id=str(request.id),
        )
        balance_after = change.balance_after

    request.status = new_status
    request.resolved_at = now_utc
    request.resolved_by = actor_id

    verdict = "approved" if new_status == REQUEST_STATUS_APPROVED else "rejected"
    await enqueue_user_notification(
        session,
        user_id=request.user_id,
        title=f"Deposit {verdict.capitalize()}",
        message=f"Your request to add {format_rupees(credited_amount)} has been {verdict}.",
        now_utc=now_utc,
    )
    logger.info(
        "wallet_request_resolved",
        request_id=str(request.id),
        user_id=request.user_id,
        status=new_status,
        actor_id=actor_id,
    )
    return RequestResolutionResult(
        request_id=request.id,
        user_id=request.user_id,
        status=new_status,
        balance_after=balance_after,
    )


async def update_withdrawal_request_status(
    session: AsyncSession,
    *,
    request_id: UUID,
    user_id: str,
    amount: Decimal,
    new_status: str,
    now_utc: datetime,
    actor_id: str | None = None,
) -> RequestResolutionResult:
    request = await WithdrawalRequestsRepo.get_by_id_for_update(session, request_id)
    if request is None:
        raise WalletRequestNotFoundError
    _validate_resolution(
        stored_user_id=request.user_id,
        stored_amount=Decimal(request.amount),
        stored_status=request.status,
        user_id=user_id,
        amount=amount,
        new_status=new_status,
    )

    debited_amount = to_money(request.amount)
    balance_after: Decimal | None = None
    if new_status == REQUEST_STATUS_APPROVED:
        user = await UsersRepo.get_by_id_for_update(session, request.user_id)
        if user is None:
            raise WalletUserNotFoundError
        change = await apply_balance_change(
            session,
            user=user,
            amount=debited_amount,
            direction=DIRECTION_DEBIT,
            entry_type=ENTRY_TYPE_WITHDRAWAL,
            description="Withdrawal approved",
            idempotency_key=f"withdrawal_request:{request.id}",
            now_utc=now_utc,
            reference_id=str(request.id),
            insufficient_message="Insufficient funds for withdrawal.",
        )
        balance_after = change.balance_after

    request.status = new_status
    request.resolved_at = now_utc
    request.resolved_by = actor_id

    verdict = "approved" if new_status == REQUEST_STATUS_APPROVED else "rejected"
    await enqueue_user_notification(
        session,
        user_id=request.user_id,
        title=f"Withdrawal {verdict.capitalize()}",
        message=f"Your withdrawal of {format_rupees(debited_amount)} has been {verdict}.",
        now_utc=now_utc,
    )
    logger.info(
        "withdrawal_request_resolved",
        request_id=str(request.id),
        user_id=request.user_id,
        status=new_status,
        actor_id=actor_id,
    )
    return RequestResolutionResult(
        request_id=request.id,
        user_id=request.user_id,
        status=new_status,
        balance_after=balance_after,
    )


async def list_wallet_requests(
    session: AsyncSession,
    *,
    status: str | None = None,
    user_id: str | None = None,
    limit: int = DEFAULT_LIST_LIMIT,
) -> list[WalletRequestSnapshot]:
    requests = await WalletRequestsRepo.list_by_status(
        session,
        status=_normalize_status_filter(status),
        user_id=user_id,
        limit=limit,
    )
    return [_wallet_request_snapshot(item) for item in requests]


async def list_withdrawal_requests(
    session: AsyncSession,
    *,
    status: str | None = None,
    user_id: str | None = None,
    limit: int = DEFAULT_LIST_LIMIT,
) -> list[WithdrawalRequestSnapshot]:
    requests = await WithdrawalRequestsRepo.list_by_status(
        session,
        status=_normalize_status_filter(status),
        user_id=user_id,
        limit=limit,
    )
    return [_withdrawal_request_snapshot(item) for item in requests]
