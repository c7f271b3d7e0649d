from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DDL,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    event,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import Base

APPEND_ONLY_GUARD_DDL = (
    """
    CREATE OR REPLACE FUNCTION fn_wallet_transactions_append_only()
    RETURNS trigger
    LANGUAGE plpgsql
    AS $$
    BEGIN
        RAISE EXCEPTION 'wallet_transactions is append-only';
    END;
    $$
    """,
    "DROP TRIGGER IF EXISTS trg_wallet_transactions_append_only ON wallet_transactions",
    """
    CREATE TRIGGER trg_wallet_transactions_append_only
    BEFORE UPDATE OR DELETE ON wallet_transactions
    FOR EACH ROW
    EXECUTE FUNCTION fn_wallet_transactions_append_only()
    """,
)


class WalletTransaction(Base):
    __tablename__ = "wallet_transactions"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_wallet_transactions_amount_positive"),
        CheckConstraint(
            "direction IN ('CREDIT','DEBIT')",
            name="ck_wallet_transactions_direction",
        ),
        CheckConstraint(
            "status IN ('SUCCESS','FAILED','PENDING')",
            name="ck_wallet_transactions_status",
        ),
        Index("idx_wallet_transactions_user_created", "user_id", "created_at"),
        Index("idx_wallet_transactions_type", "entry_type"),
        Index("idx_wallet_transactions_reference", "reference_id"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    user_id: Mapped[str] = mapped_column(String(128), ForeignKey("users.id"), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    direction: Mapped[str] = mapped_column(String(8), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    entry_type: Mapped[str] = mapped_column(String(32), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    balance_after: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    idempotency_key: Mapped[str] = mapped_column(String(256), unique=True, nullable=False)
    reference_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


@event.listens_for(WalletTransaction, "before_update")
def _reject_update(mapper, connection, target) -> None:
    raise ValueError("wallet_transactions is append-only")


@event.listens_for(WalletTransaction, "before_delete")
def _reject_delete(mapper, connection, target) -> None:
    raise ValueError("wallet_transactions is append-only")


for _statement in APPEND_ONLY_GUARD_DDL:
    event.listen(
        WalletTransaction.__table__,
        "after_create",
        DDL(_statement).execute_if(dialect="postgresql"),
    )
