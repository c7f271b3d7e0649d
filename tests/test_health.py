from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app.api.routes import health as health_routes
from app.main import app


async def _passing_check() -> dict[str, str]:
    return {"status": "ok"}


def _patch_checks(monkeypatch, **overrides) -> None:
    for name in ("_check_database", "_check_redis", "_check_celery_worker"):
        monkeypatch.setattr(health_routes, name, overrides.get(name, _passing_check))


def test_live_does_not_touch_dependencies(monkeypatch) -> None:
    async def _explode() -> dict[str, str]:
        raise AssertionError("liveness must not run dependency checks")

    _patch_checks(
        monkeypatch,
        _check_database=_explode,
        _check_redis=_explode,
        _check_celery_worker=_explode,
    )

    response = TestClient(app).get("/live")

    assert response.status_code == 200
    assert response.json() == {"status": "live"}


def test_health_reports_every_dependency(monkeypatch) -> None:
    _patch_checks(monkeypatch)

    response = TestClient(app).get("/health")

    assert response.status_code == 200
    assert response.json() == {
        "status": "ok",
        "checks": {
            "database": {"status": "ok"},
            "redis": {"status": "ok"},
            "celery": {"status": "ok"},
        },
    }


def test_health_degrades_when_worker_is_missing(monkeypatch) -> None:
    async def _no_workers() -> dict[str, str]:
        return {"status": "failed", "error": "celery_no_workers"}

    _patch_checks(monkeypatch, _check_celery_worker=_no_workers)

    response = TestClient(app).get("/health")

    assert response.status_code == 503
    payload = response.json()
    assert payload["status"] == "degraded"
    assert payload["checks"]["celery"] == {"status": "failed", "error": "celery_no_workers"}
    assert payload["checks"]["database"] == {"status": "ok"}


def test_ready_ignores_worker_outage(monkeypatch) -> None:
    async def _failed_celery() -> dict[str, str]:
        return {"status": "failed", "error": "celery_unavailable"}

    _patch_checks(monkeypatch, _check_celery_worker=_failed_celery)

    response = TestClient(app).get("/ready")

    assert response.status_code == 200
    assert response.json() == {
        "status": "ready",
        "checks": {
            "database": {"status": "ok"},
            "redis": {"status": "ok"},
        },
    }


def test_ready_returns_503_when_database_is_down(monkeypatch) -> None:
    async def _failed_database() -> dict[str, str]:
        return {"status": "failed", "error": "database_unavailable"}

    _patch_checks(monkeypatch, _check_database=_failed_database)

    response = TestClient(app).get("/ready")

    assert response.status_code == 503
    assert response.json()["status"] == "not_ready"
    assert response.json()["checks"]["database"]["error"] == "database_unavailable"


@pytest.mark.asyncio
async def test_database_check_hides_connection_details(monkeypatch) -> None:
    class _BrokenSession:
        async def __aenter__(self):
            raise RuntimeError("password=secret")

        async def __aexit__(self, exc_type, exc, tb) -> bool:
            return False

    monkeypatch.setattr(health_routes, "SessionLocal", lambda: _BrokenSession())

    result = await health_routes._check_database()
    assert result == {"status": "failed", "error": "database_unavailable"}


@pytest.mark.asyncio
async def test_redis_check_hides_connection_details(monkeypatch) -> None:
    class _BrokenRedis:
        async def __aenter__(self):
            return self

        async def __aexit__(self, exc_type, exc, tb) -> bool:
            return False

        async def ping(self) -> bool:
            raise ConnectionError("redis://:secret@cache:6379")

    monkeypatch.setattr(health_routes.Redis, "from_url", lambda url: _BrokenRedis())

    result = await health_routes._check_redis()
    assert result == {"status": "failed", "error": "redis_unavailable"}


def test_celery_check_hides_broker_details(monkeypatch) -> None:
    class _BrokenControl:
        def inspect(self, timeout: float):
            raise RuntimeError("broker-url=redis://secret")

    monkeypatch.setattr(health_routes.celery_app, "control", _BrokenControl())

    result = health_routes._check_celery_worker_sync()
    assert result == {"status": "failed", "error": "celery_unavailable"}


def test_celery_check_counts_responding_workers(monkeypatch) -> None:
    class _Inspector:
        def ping(self) -> dict[str, dict[str, str]]:
            return {"worker@a": {"ok": "pong"}, "worker@b": {"ok": "pong"}}

    class _Control:
        def inspect(self, timeout: float) -> _Inspector:
            return _Inspector()

    monkeypatch.setattr(health_routes.celery_app, "control", _Control())

    result = health_routes._check_celery_worker_sync()
    assert result == {"status": "ok", "workers": 2}
