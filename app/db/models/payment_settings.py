from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import Base


class PaymentSettings(Base):
    __tablename__ = "payment_settings"

    version: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    upi_id: Mapped[str] = mapped_column(String(128), nullable=False)
    qr_image_url: Mapped[str] = mapped_column(Text, nullable=False)
    updated_by: Mapped[str | None] = mapped_column(String(128), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
