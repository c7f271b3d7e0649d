from __future__ import annotations

from types import SimpleNamespace

from httpx import ASGITransport, AsyncClient

from app.main import app
from app.services import internal_auth

INTERNAL_TOKEN = "internal-secret"


class _FakeSessionContext:
    def __init__(self, session: object) -> None:
        self._session = session

    async def __aenter__(self) -> object:
        return self._session

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        return False


class FakeSessionFactory:
    def __init__(self) -> None:
        self.session = object()
        self.write_sessions = 0
        self.read_sessions = 0

    def __call__(self) -> _FakeSessionContext:
        self.read_sessions += 1
        return _FakeSessionContext(self.session)

    def begin(self) -> _FakeSessionContext:
        self.write_sessions += 1
        return _FakeSessionContext(self.session)


def allow_internal_access(monkeypatch, *, allowlist: str = "127.0.0.1/32") -> None:
    monkeypatch.setattr(
        internal_auth,
        "get_settings",
        lambda: SimpleNamespace(
            internal_api_token=INTERNAL_TOKEN,
            internal_api_allowlist=allowlist,
            internal_api_trusted_proxies="",
        ),
    )


def internal_client() -> AsyncClient:
    return AsyncClient(
        transport=ASGITransport(app=app, client=("127.0.0.1", 8080)),
        base_url="http://testserver",
        headers={"X-Internal-Token": INTERNAL_TOKEN},
    )
