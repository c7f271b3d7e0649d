from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from redis.asyncio import Redis
from sqlalchemy import text

from app.core.config import get_settings
from app.db.session import SessionLocal
from app.workers.celery_app import celery_app

router = APIRouter(tags=["health"])
logger = structlog.get_logger(__name__)

Check = Callable[[], Awaitable[dict[str, Any]]]


def _ok_check(**extra: Any) -> dict[str, Any]:
    return {"status": "ok", **extra}


def _failed_check(error: str) -> dict[str, str]:
    return {"status": "failed", "error": error}


async def _check_database() -> dict[str, Any]:
    try:
        async with SessionLocal() as session:
            await session.execute(text("SELECT 1"))
    except Exception as exc:
        logger.warning("health_check_failed", check="database", error_type=type(exc).__name__)
        return _failed_check("database_unavailable")
    return _ok_check()


async def _check_redis() -> dict[str, Any]:
    try:
        async with Redis.from_url(get_settings().redis_url) as redis_client:
            pong = await redis_client.ping()
    except Exception as exc:
        logger.warning("health_check_failed", check="redis", error_type=type(exc).__name__)
        return _failed_check("redis_unavailable")
    if pong is not True:
        return _failed_check("redis_unexpected_ping_response")
    return _ok_check()


def _check_celery_worker_sync() -> dict[str, Any]:
    try:
        inspector = celery_app.control.inspect(timeout=1.0)
        replies = inspector.ping() if inspector is not None else None
    except Exception as exc:
        logger.warning("health_check_failed", check="celery", error_type=type(exc).__name__)
        return _failed_check("celery_unavailable")
    if not replies:
        return _failed_check("celery_no_workers")
    return _ok_check(workers=len(replies))


async def _check_celery_worker() -> dict[str, Any]:
    return await asyncio.to_thread(_check_celery_worker_sync)


async def _collect_checks(checks: dict[str, Check]) -> dict[str, dict[str, Any]]:
    results = await asyncio.gather(*(check() for check in checks.values()))
    return dict(zip(checks.keys(), results))


def _all_checks_ok(checks: dict[str, dict[str, Any]]) -> bool:
    return all(check.get("status") == "ok" for check in checks.values())


async def _checks_response(
    checks: dict[str, Check],
    *,
    ok_status: str,
    failed_status: str,
) -> JSONResponse:
    results = await _collect_checks(checks)
    passed = _all_checks_ok(results)
    return JSONResponse(
        status_code=status.HTTP_200_OK if passed else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": ok_status if passed else failed_status,
            "checks": results,
        },
    )


@router.get("/live")
async def live() -> dict[str, str]:
    return {"status": "live"}


@router.get("/health")
async def health() -> JSONResponse:
    return await _checks_response(
        {
            "database": _check_database,
            "redis": _check_redis,
            "celery": _check_celery_worker,
        },
        ok_status="ok",
        failed_status="degraded",
    )


@router.get("/ready")
async def ready() -> JSONResponse:
    # Worker outages do not take the API out of rotation.
    return await _checks_response(
        {"database": _check_database, "redis": _check_redis},
        ok_status="ready",
        failed_status="not_ready",
    )
