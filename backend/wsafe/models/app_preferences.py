"""Persisted app preferences: auto-call toggle and primary contact."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column

from wsafe.db.base import Base


class AppPreferences(Base):
    __tablename__ = "app_preferences"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    auto_call_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    primary_contact_id: Mapped[int | None] = mapped_column(
        ForeignKey("contacts.id", ondelete="SET NULL"), nullable=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
