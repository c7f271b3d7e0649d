from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Numeric, String
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import Base


class Entry(Base):
    __tablename__ = "entries"
    __table_args__ = (
        CheckConstraint(
            "status IN ('CONFIRMED','CANCELLED','COMPLETED')",
            name="ck_entries_status",
        ),
        CheckConstraint("paid_amount >= 0", name="ck_entries_paid_amount_non_negative"),
        Index("idx_entries_user_created", "user_id", "created_at"),
    )

    tournament_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("tournaments.id"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(String(128), ForeignKey("users.id"), primary_key=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    paid_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
