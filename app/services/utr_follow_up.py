from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import structlog
from openai import AsyncOpenAI
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.db.repo.wallet_requests_repo import WalletRequestsRepo
from app.economy.wallet.money import format_rupees

NO_FOLLOW_UP_MESSAGE = "No follow-up needed yet."
FALLBACK_FOLLOW_UP_MESSAGE = (
    "We've noticed your payment request is still pending. "
    "Please contact support for assistance."
)

SYSTEM_PROMPT = (
    "You are a helpful assistant that reminds users to follow up on their "
    "pending UTR payment requests."
)
USER_PROMPT_TEMPLATE = """A user submitted a wallet request with the following details:
- Request ID: {request_id}
- User ID: {user_id}
- Amount: {amount}
- UTR Code: {utr}
- Timestamp: {timestamp}

Generate a friendly but firm reminder message to encourage the user to follow up with \
the admin or support team if the request has been pending for more than 24 hours. \
Be concise and direct."""

TextGenerator = Callable[[str, str], Awaitable[str]]

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class FollowUpRequest:
    request_id: str
    user_id: str
    amount: Decimal
    utr: str
    submitted_at: datetime


class FollowUpGenerationError(RuntimeError):
    pass


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def hours_pending(*, submitted_at: datetime, now_utc: datetime) -> float:
    return (_as_utc(now_utc) - _as_utc(submitted_at)).total_seconds() / 3600


def render_prompt(request: FollowUpRequest) -> str:
    return USER_PROMPT_TEMPLATE.format(
        request_id=request.request_id,
        user_id=request.user_id,
        amount=format_rupees(request.amount),
        utr=request.utr,
        timestamp=_as_utc(request.submitted_at).isoformat(),
    )


async def openai_text_generator(system_prompt: str, user_prompt: str) -> str:
    settings = get_settings()
    if not settings.openai_api_key:
        raise FollowUpGenerationError("OPENAI_API_KEY is not configured")
    # One attempt per call; any failure falls back to the canned message.
    async with AsyncOpenAI(
        api_key=settings.openai_api_key,
        max_retries=0,
        timeout=settings.follow_up_timeout_seconds,
    ) as client:
        response = await client.chat.completions.create(
            model=settings.follow_up_model,
            temperature=0.6,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        )
    return (response.choices[0].message.content or "").strip()


async def get_utr_follow_up_message(
    request: FollowUpRequest,
    *,
    now_utc: datetime,
    generator: TextGenerator | None = None,
    threshold_hours: int | None = None,
) -> str:
    threshold = threshold_hours
    if threshold is None:
        threshold = get_settings().follow_up_threshold_hours
    if hours_pending(submitted_at=request.submitted_at, now_utc=now_utc) <= threshold:
        return NO_FOLLOW_UP_MESSAGE

    resolved_generator = generator or openai_text_generator
    try:
        message = await resolved_generator(SYSTEM_PROMPT, render_prompt(request))
    except Exception:
        logger.exception("utr_follow_up_generation_failed", request_id=request.request_id)
        return FALLBACK_FOLLOW_UP_MESSAGE

    message = (message or "").strip()
    if not message:
        logger.warning("utr_follow_up_empty_response", request_id=request.request_id)
        return FALLBACK_FOLLOW_UP_MESSAGE
    return message


async def get_pending_request_follow_up(
    session: AsyncSession,
    *,
    user_id: str,
    now_utc: datetime,
    generator: TextGenerator | None = None,
) -> str | None:
    threshold_hours = get_settings().follow_up_threshold_hours
    pending = await WalletRequestsRepo.get_oldest_pending_for_user_before(
        session,
        user_id=user_id,
        created_before=now_utc - timedelta(hours=threshold_hours),
    )
    if pending is None:
        return None

    message = await get_utr_follow_up_message(
        FollowUpRequest(
            request_id=str(pending.id),
            user_id=pending.user_id,
            amount=Decimal(pending.amount),
            utr=pending.utr,
            submitted_at=pending.created_at,
        ),
        now_utc=now_utc,
        generator=generator,
        threshold_hours=threshold_hours,
    )
    if message == NO_FOLLOW_UP_MESSAGE:
        return None
    return message
