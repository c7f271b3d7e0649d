from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy.engine import make_url

TEST_DB_MARKER = "test"
LOCAL_DB_HOSTS = frozenset(
    {
        "localhost",
        "127.0.0.1",
        "::1",
        "postgres",
        "arena_ace_postgres",
    }
)


class UnsafeIntegrationDbError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class IntegrationDbTarget:
    database_name: str
    host: str
    problems: tuple[str, ...] = ()

    @property
    def is_safe(self) -> bool:
        return not self.problems


def assess_integration_db_safety(
    database_url: str,
    *,
    extra_hosts: Iterable[str] = (),
) -> IntegrationDbTarget:
    parsed = make_url(database_url)
    database_name = (parsed.database or "").strip()
    host = (parsed.host or "").strip().lower()
    allowed_hosts = LOCAL_DB_HOSTS | {
        item.strip().lower() for item in extra_hosts if item.strip()
    }

    problems: list[str] = []
    if parsed.get_backend_name() != "postgresql":
        problems.append("only PostgreSQL databases are supported")
    if not database_name:
        problems.append("database name is empty")
    elif TEST_DB_MARKER not in database_name.lower():
        problems.append(f"database name must contain '{TEST_DB_MARKER}'")
    if host not in allowed_hosts:
        problems.append(f"host '{host}' is not a local test host")

    return IntegrationDbTarget(
        database_name=database_name,
        host=host,
        problems=tuple(problems),
    )


def assert_safe_integration_db(database_url: str, *, extra_hosts: Iterable[str] = ()) -> None:
    target = assess_integration_db_safety(database_url, extra_hosts=extra_hosts)
    if target.is_safe:
        return

    raise UnsafeIntegrationDbError(
        "Refusing to TRUNCATE Arena Ace tables outside a local test database: "
        f"{'; '.join(target.problems)} "
        f"(name='{target.database_name}' host='{target.host}')"
    )
