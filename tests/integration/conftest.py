from __future__ import annotations

import os

import pytest
from sqlalchemy import text

import app.db.models  # noqa: F401
from app.core.integration_db_safety import assert_safe_integration_db
from app.db.models.base import Base
from app.db.models.wallet_transactions import APPEND_ONLY_GUARD_DDL
from app.db.session import engine

TRUNCATE_TABLES = (
    "notification_reads",
    "notifications",
    "outbox_events",
    "tournament_results",
    "entries",
    "wallet_transactions",
    "wallet_requests",
    "withdrawal_requests",
    "payment_settings",
    "tournaments",
    "users",
)

TRUNCATE_SQL = f"TRUNCATE TABLE {', '.join(TRUNCATE_TABLES)} RESTART IDENTITY CASCADE"


@pytest.fixture(scope="session", autouse=True)
def guard_integration_db_target() -> None:
    extra_hosts = os.environ.get("INTEGRATION_DB_EXTRA_HOSTS", "").split(",")
    assert_safe_integration_db(str(engine.url), extra_hosts=extra_hosts)


@pytest.fixture(autouse=True)
async def cleanup_db() -> None:
    # Each test runs on its own event loop.
    await engine.dispose()

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as exc:  # pragma: no cover - environment-dependent
        pytest.skip(f"Postgres is required for integration tests: {exc}")

    async with engine.begin() as conn:
        # No-op once `alembic upgrade head` has been applied.
        await conn.run_sync(Base.metadata.create_all)
        for statement in APPEND_ONLY_GUARD_DDL:
            await conn.exec_driver_sql(statement)
        await conn.execute(text(TRUNCATE_SQL))

    yield

    await engine.dispose()
