"""arena_ace_core_schema

Revision ID: 5e1a7c3b9d20
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "5e1a7c3b9d20"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(128), primary_key=True),
        sa.Column("name", sa.Text(), nullable=True),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("photo_url", sa.Text(), nullable=True),
        sa.Column("wallet_balance", sa.Numeric(12, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("role", sa.String(16), nullable=False, server_default=sa.text("'USER'")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("role IN ('USER','ADMIN')", name="ck_users_role"),
        sa.CheckConstraint("wallet_balance >= 0", name="ck_users_wallet_balance_non_negative"),
    )
    op.create_index("idx_users_role", "users", ["role"])
    op.create_index("idx_users_created_at", "users", ["created_at"])

    op.create_table(
        "tournaments",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("title", sa.String(128), nullable=False),
        sa.Column("game_type", sa.String(32), nullable=False),
        sa.Column("starts_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("entry_fee", sa.Numeric(12, 2), nullable=False),
        sa.Column("slots", sa.Integer(), nullable=False),
        sa.Column("prize", sa.Numeric(12, 2), nullable=False),
        sa.Column("rules", postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("is_mega", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("image_url", sa.Text(), nullable=False),
        sa.Column("room_id", sa.String(64), nullable=False, server_default=sa.text("''")),
        sa.Column("room_password", sa.String(64), nullable=False, server_default=sa.text("''")),
        sa.Column("winner_prizes", postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("joined_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "status IN ('DRAFT','PUBLISHED','LIVE','COMPLETED','CANCELLED')",
            name="ck_tournaments_status",
        ),
        sa.CheckConstraint(
            "status = 'DRAFT' OR starts_at IS NOT NULL",
            name="ck_tournaments_schedule_resolved",
        ),
        sa.CheckConstraint("entry_fee >= 0", name="ck_tournaments_entry_fee_non_negative"),
        sa.CheckConstraint("prize >= 0", name="ck_tournaments_prize_non_negative"),
        sa.CheckConstraint("slots >= 1", name="ck_tournaments_slots_positive"),
        sa.CheckConstraint(
            "joined_count >= 0 AND joined_count <= slots",
            name="ck_tournaments_joined_count_range",
        ),
    )
    op.create_index("idx_tournaments_status_starts_at", "tournaments", ["status", "starts_at"])
    op.create_index("idx_tournaments_is_mega", "tournaments", ["is_mega"])

    op.create_table(
        "entries",
        sa.Column("tournament_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", sa.String(128), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("paid_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("status IN ('CONFIRMED','CANCELLED','COMPLETED')", name="ck_entries_status"),
        sa.CheckConstraint("paid_amount >= 0", name="ck_entries_paid_amount_non_negative"),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournaments.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("tournament_id", "user_id"),
    )
    op.create_index("idx_entries_user_created", "entries", ["user_id", "created_at"])

    op.create_table(
        "wallet_transactions",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("user_id", sa.String(128), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("direction", sa.String(8), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("entry_type", sa.String(32), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("balance_after", sa.Numeric(12, 2), nullable=False),
        sa.Column("idempotency_key", sa.String(256), nullable=False),
        sa.Column("reference_id", sa.String(128), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("amount > 0", name="ck_wallet_transactions_amount_positive"),
        sa.CheckConstraint("direction IN ('CREDIT','DEBIT')", name="ck_wallet_transactions_direction"),
        sa.CheckConstraint(
            "status IN ('SUCCESS','FAILED','PENDING')",
            name="ck_wallet_transactions_status",
        ),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.UniqueConstraint("idempotency_key", name="uq_wallet_transactions_idempotency_key"),
    )
    op.create_index(
        "idx_wallet_transactions_user_created",
        "wallet_transactions",
        ["user_id", "created_at"],
    )
    op.create_index("idx_wallet_transactions_type", "wallet_transactions", ["entry_type"])
    op.create_index("idx_wallet_transactions_reference", "wallet_transactions", ["reference_id"])
    op.execute(
        """
        CREATE OR REPLACE FUNCTION fn_wallet_transactions_append_only()
        RETURNS trigger
        LANGUAGE plpgsql
        AS $$
        BEGIN
            RAISE EXCEPTION 'wallet_transactions is append-only';
        END;
        $$;
        """
    )
    op.execute(
        """
        CREATE TRIGGER trg_wallet_transactions_append_only
        BEFORE UPDATE OR DELETE ON wallet_transactions
        FOR EACH ROW
        EXECUTE FUNCTION fn_wallet_transactions_append_only();
        """
    )

    for table_name, detail_column, detail_type, unique_detail in (
        ("wallet_requests", "utr", sa.String(64), True),
        ("withdrawal_requests", "upi_id", sa.String(128), False),
    ):
        constraints: list[sa.schema.SchemaItem] = [
            sa.CheckConstraint("amount > 0", name=f"ck_{table_name}_amount_positive"),
            sa.CheckConstraint(
                "status IN ('PENDING','APPROVED','REJECTED')",
                name=f"ck_{table_name}_status",
            ),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        ]
        if unique_detail:
            constraints.append(
                sa.UniqueConstraint(detail_column, name=f"uq_{table_name}_{detail_column}")
            )
        op.create_table(
            table_name,
            sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
            sa.Column("user_id", sa.String(128), nullable=False),
            sa.Column("amount", sa.Numeric(12, 2), nullable=False),
            sa.Column(detail_column, detail_type, nullable=False),
            sa.Column("status", sa.String(16), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("resolved_by", sa.String(128), nullable=True),
            *constraints,
        )
        op.create_index(f"idx_{table_name}_status_created", table_name, ["status", "created_at"])
    op.create_index(
        "idx_wallet_requests_user_status_created",
        "wallet_requests",
        ["user_id", "status", "created_at"],
    )
    op.create_index(
        "idx_withdrawal_requests_user_created",
        "withdrawal_requests",
        ["user_id", "created_at"],
    )

    op.create_table(
        "tournament_results",
        sa.Column("tournament_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("tournament_title", sa.String(128), nullable=False),
        sa.Column("is_mega", sa.Boolean(), nullable=False),
        sa.Column("results", postgresql.JSONB(), nullable=False),
        sa.Column("declared_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournaments.id"]),
        sa.PrimaryKeyConstraint("tournament_id"),
    )

    op.create_table(
        "notifications",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("user_id", sa.String(128), nullable=True),
        sa.Column("audience", sa.String(8), nullable=False),
        sa.Column("title", sa.String(256), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("dedupe_key", sa.String(192), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("audience IN ('USER','ALL')", name="ck_notifications_audience"),
        sa.CheckConstraint(
            "(audience = 'USER' AND user_id IS NOT NULL) OR (audience = 'ALL' AND user_id IS NULL)",
            name="ck_notifications_audience_target",
        ),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("dedupe_key", name="uq_notifications_dedupe_key"),
    )
    op.create_index("idx_notifications_user_created", "notifications", ["user_id", "created_at"])
    op.create_index(
        "idx_notifications_audience_created",
        "notifications",
        ["audience", "created_at"],
    )

    op.create_table(
        "notification_reads",
        sa.Column("notification_id", sa.BigInteger(), nullable=False),
        sa.Column("user_id", sa.String(128), nullable=False),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["notification_id"], ["notifications.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("notification_id", "user_id"),
    )

    op.create_table(
        "payment_settings",
        sa.Column("version", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("upi_id", sa.String(128), nullable=False),
        sa.Column("qr_image_url", sa.Text(), nullable=False),
        sa.Column("updated_by", sa.String(128), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("version"),
    )

    op.create_table(
        "outbox_events",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("event_type", sa.String(64), nullable=False),
        sa.Column("payload", postgresql.JSONB(), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("available_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_error", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("dispatched_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "status IN ('PENDING','DISPATCHED','FAILED')",
            name="ck_outbox_events_status",
        ),
    )
    op.create_index(
        "idx_outbox_events_status_available",
        "outbox_events",
        ["status", "available_at"],
    )


def downgrade() -> None:
    op.drop_index("idx_outbox_events_status_available", table_name="outbox_events")
    op.drop_table("outbox_events")
    op.drop_table("payment_settings")
    op.drop_table("notification_reads")
    op.drop_index("idx_notifications_audience_created", table_name="notifications")
    op.drop_index("idx_notifications_user_created", table_name="notifications")
    op.drop_table("notifications")
    op.drop_table("tournament_results")
    op.drop_index("idx_withdrawal_requests_user_created", table_name="withdrawal_requests")
    op.drop_index("idx_wallet_requests_user_status_created", table_name="wallet_requests")
    for table_name in ("withdrawal_requests", "wallet_requests"):
        op.drop_index(f"idx_{table_name}_status_created", table_name=table_name)
        op.drop_table(table_name)
    op.execute("DROP TRIGGER IF EXISTS trg_wallet_transactions_append_only ON wallet_transactions;")
    op.execute("DROP FUNCTION IF EXISTS fn_wallet_transactions_append_only();")
    op.drop_index("idx_wallet_transactions_reference", table_name="wallet_transactions")
    op.drop_index("idx_wallet_transactions_type", table_name="wallet_transactions")
    op.drop_index("idx_wallet_transactions_user_created", table_name="wallet_transactions")
    op.drop_table("wallet_transactions")
    op.drop_index("idx_entries_user_created", table_name="entries")
    op.drop_table("entries")
    op.drop_index("idx_tournaments_is_mega", table_name="tournaments")
    op.drop_index("idx_tournaments_status_starts_at", table_name="tournaments")
    op.drop_table("tournaments")
    op.drop_index("idx_users_created_at", table_name="users")
    op.drop_index("idx_users_role", table_name="users")
    op.drop_table("users")
