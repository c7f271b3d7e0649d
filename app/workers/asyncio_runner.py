from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog

from app.db.session import dispose_engine

T = TypeVar("T")

logger = structlog.get_logger(__name__)


async def _run_on_fresh_engine(job: Callable[[], Awaitable[T]]) -> T:
    # Pooled asyncpg connections are bound to the loop that opened them.
    await dispose_engine()
    try:
        return await job()
    finally:
        await dispose_engine()


def run_async_job(job: Callable[[], Awaitable[T]]) -> T:
    try:
        return asyncio.run(_run_on_fresh_engine(job))
    except Exception:
        logger.exception("async_job_failed", job=getattr(job, "__name__", repr(job)))
        raise
