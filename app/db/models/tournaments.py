from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, CheckConstraint, DateTime, Index, Integer, Numeric, String, Text, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import Base


class Tournament(Base):
    __tablename__ = "tournaments"
    __table_args__ = (
        CheckConstraint(
            "status IN ('DRAFT','PUBLISHED','LIVE','COMPLETED','CANCELLED')",
            name="ck_tournaments_status",
        ),
        CheckConstraint(
            "status = 'DRAFT' OR starts_at IS NOT NULL",
            name="ck_tournaments_schedule_resolved",
        ),
        CheckConstraint("entry_fee >= 0", name="ck_tournaments_entry_fee_non_negative"),
        CheckConstraint("prize >= 0", name="ck_tournaments_prize_non_negative"),
        CheckConstraint("slots >= 1", name="ck_tournaments_slots_positive"),
        CheckConstraint(
            "joined_count >= 0 AND joined_count <= slots",
            name="ck_tournaments_joined_count_range",
        ),
        Index("idx_tournaments_status_starts_at", "status", "starts_at"),
        Index("idx_tournaments_is_mega", "is_mega"),
    )

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    title: Mapped[str] = mapped_column(String(128), nullable=False)
    game_type: Mapped[str] = mapped_column(String(32), nullable=False)
    starts_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    entry_fee: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    slots: Mapped[int] = mapped_column(Integer, nullable=False)
    prize: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    rules: Mapped[list[str]] = mapped_column(
        JSONB,
        nullable=False,
        server_default=text("'[]'::jsonb"),
    )
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    is_mega: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("false"))
    image_url: Mapped[str] = mapped_column(Text, nullable=False)
    room_id: Mapped[str] = mapped_column(String(64), nullable=False, server_default=text("''"))
    room_password: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        server_default=text("''"),
    )
    winner_prizes: Mapped[list[dict[str, object]]] = mapped_column(
        JSONB,
        nullable=False,
        server_default=text("'[]'::jsonb"),
    )
    joined_count: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
