from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from studio.db.base import Base
from studio.models.common import utcnow


class ModuleRecorder(Base):
    __tablename__ = "module_recorders"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    log_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_run_ok: Mapped[bool] = mapped_column(Boolean, default=True)
    auto_create: Mapped[bool] = mapped_column(Boolean, default=False)
    all_view_update: Mapped[bool] = mapped_column(Boolean, default=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
