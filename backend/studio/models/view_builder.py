from __future__ import annotations

from sqlalchemy import Boolean, ForeignKey, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from studio.db.base import Base


class ViewBuilder(Base):
    __tablename__ = "view_builders"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), index=True)
    model: Mapped[str | None] = mapped_column(String(512), nullable=True)
    view_type: Mapped[str | None] = mapped_column(String(32), nullable=True)
    edited: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    recorded: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    params: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    meta_view_generated_id: Mapped[int | None] = mapped_column(ForeignKey("meta_views.id"), nullable=True)
