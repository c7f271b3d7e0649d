from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, DateTime, ForeignKey, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import Base


class TournamentResult(Base):
    __tablename__ = "tournament_results"

    tournament_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("tournaments.id"),
        primary_key=True,
    )
    tournament_title: Mapped[str] = mapped_column(String(128), nullable=False)
    is_mega: Mapped[bool] = mapped_column(Boolean, nullable=False)
    results: Mapped[list[dict[str, object]]] = mapped_column(JSONB, nullable=False)
    declared_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
