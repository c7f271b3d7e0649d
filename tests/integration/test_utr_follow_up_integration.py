from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

import pytest

from app.db.session import SessionLocal
from app.economy.wallet.requests import submit_wallet_request, update_wallet_request_status
from app.services.utr_follow_up import get_pending_request_follow_up
from tests.integration.arena_fixtures import NOW_UTC, create_user


class _FakeGenerator:
    def __init__(self) -> None:
        self.prompts: list[str] = []

    async def __call__(self, system_prompt: str, user_prompt: str) -> str:
        self.prompts.append(user_prompt)
        return "Your deposit is still pending. Please reach out to support."


async def _submit(user_id: str, utr: str, *, hours_ago: int):
    async with SessionLocal.begin() as session:
        return await submit_wallet_request(
            session,
            user_id=user_id,
            amount=Decimal("100"),
            utr=utr,
            now_utc=NOW_UTC - timedelta(hours=hours_ago),
        )


async def _follow_up(user_id: str, generator: _FakeGenerator) -> str | None:
    async with SessionLocal() as session:
        return await get_pending_request_follow_up(
            session,
            user_id=user_id,
            now_utc=NOW_UTC,
            generator=generator,
        )


@pytest.mark.asyncio
async def test_stale_pending_request_gets_a_reminder() -> None:
    await create_user("follow-stale")
    await _submit("follow-stale", "UTR-STALE-1", hours_ago=2)
    await _submit("follow-stale", "UTR-STALE-2", hours_ago=30)
    generator = _FakeGenerator()

    message = await _follow_up("follow-stale", generator)

    assert message == "Your deposit is still pending. Please reach out to support."
    assert len(generator.prompts) == 1
    assert "UTR-STALE-2" in generator.prompts[0]


@pytest.mark.asyncio
async def test_recent_or_resolved_requests_need_no_reminder() -> None:
    await create_user("follow-fresh")
    await _submit("follow-fresh", "UTR-FRESH-1", hours_ago=3)
    resolved = await _submit("follow-fresh", "UTR-FRESH-2", hours_ago=40)
    async with SessionLocal.begin() as session:
        await update_wallet_request_status(
            session,
            request_id=resolved.request_id,
            user_id="follow-fresh",
            amount=Decimal("100"),
            new_status="REJECTED",
            now_utc=NOW_UTC,
        )
    generator = _FakeGenerator()

    assert await _follow_up("follow-fresh", generator) is None
    assert await _follow_up("nobody", generator) is None
    assert generator.prompts == []
