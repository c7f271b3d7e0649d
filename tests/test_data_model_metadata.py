from __future__ import annotations

from uuid import UUID

from sqlalchemy import CheckConstraint

import app.db.models  # noqa: F401
from app.db.models.base import Base
from app.db.models.wallet_transactions import APPEND_ONLY_GUARD_DDL


def _check_names(table_name: str) -> set[str]:
    table = Base.metadata.tables[table_name]
    return {
        constraint.name
        for constraint in table.constraints
        if isinstance(constraint, CheckConstraint)
    }


def _index_names(table_name: str) -> set[str]:
    return {index.name for index in Base.metadata.tables[table_name].indexes}


def test_all_wallet_and_tournament_tables_registered() -> None:
    expected_tables = {
        "users",
        "tournaments",
        "entries",
        "tournament_results",
        "wallet_transactions",
        "wallet_requests",
        "withdrawal_requests",
        "notifications",
        "notification_reads",
        "payment_settings",
        "outbox_events",
    }
    assert expected_tables == set(Base.metadata.tables)


def test_balance_and_amount_constraints_present() -> None:
    assert "ck_users_wallet_balance_non_negative" in _check_names("users")
    assert "ck_users_role" in _check_names("users")
    assert "ck_wallet_transactions_amount_positive" in _check_names("wallet_transactions")
    assert "ck_wallet_transactions_direction" in _check_names("wallet_transactions")
    assert "ck_wallet_requests_amount_positive" in _check_names("wallet_requests")
    assert "ck_withdrawal_requests_amount_positive" in _check_names("withdrawal_requests")


def test_tournament_constraints_present() -> None:
    tournament_checks = _check_names("tournaments")
    assert "ck_tournaments_status" in tournament_checks
    assert "ck_tournaments_schedule_resolved" in tournament_checks
    assert "ck_tournaments_joined_count_range" in tournament_checks
    assert "idx_tournaments_status_starts_at" in _index_names("tournaments")

    entries = Base.metadata.tables["entries"]
    assert {column.name for column in entries.primary_key.columns} == {"tournament_id", "user_id"}
    assert "ck_entries_status" in _check_names("entries")


def test_uniqueness_guards_present() -> None:
    wallet_transactions = Base.metadata.tables["wallet_transactions"]
    assert wallet_transactions.c.idempotency_key.unique is True

    wallet_requests = Base.metadata.tables["wallet_requests"]
    assert wallet_requests.c.utr.unique is True

    notifications = Base.metadata.tables["notifications"]
    assert notifications.c.dedupe_key.unique is True

    notification_reads = Base.metadata.tables["notification_reads"]
    assert {column.name for column in notification_reads.primary_key.columns} == {
        "notification_id",
        "user_id",
    }

    payment_settings = Base.metadata.tables["payment_settings"]
    assert [column.name for column in payment_settings.primary_key.columns] == ["version"]


def test_outbox_and_request_indexes_present() -> None:
    assert "idx_outbox_events_status_available" in _index_names("outbox_events")
    assert "idx_wallet_requests_user_status_created" in _index_names("wallet_requests")
    assert "idx_withdrawal_requests_status_created" in _index_names("withdrawal_requests")
    assert "idx_wallet_transactions_user_created" in _index_names("wallet_transactions")


def test_ledger_key_columns_fit_longest_identifiers() -> None:
    wallet_transactions = Base.metadata.tables["wallet_transactions"]
    user_id_length = Base.metadata.tables["users"].c.id.type.length
    longest_user_id = "u" * user_id_length
    tournament_id = str(UUID(int=0))

    derived_keys = (
        f"tournament_entry:{tournament_id}:{longest_user_id}",
        f"prize:{tournament_id}:{longest_user_id}",
        f"admin:{'k' * 96}",
    )
    key_length = wallet_transactions.c.idempotency_key.type.length
    assert all(len(key) <= key_length for key in derived_keys)
    assert wallet_transactions.c.reference_id.type.length >= user_id_length


def test_append_only_guard_ddl_is_rerunnable() -> None:
    function_ddl, drop_ddl, trigger_ddl = APPEND_ONLY_GUARD_DDL
    assert "CREATE OR REPLACE FUNCTION fn_wallet_transactions_append_only" in function_ddl
    assert drop_ddl.startswith("DROP TRIGGER IF EXISTS trg_wallet_transactions_append_only")
    assert "BEFORE UPDATE OR DELETE ON wallet_transactions" in trigger_ddl


def test_users_columns() -> None:
    assert [column.name for column in Base.metadata.tables["users"].columns] == [
        "id",
        "name",
        "email",
        "photo_url",
        "wallet_balance",
        "role",
        "created_at",
        "updated_at",
    ]
