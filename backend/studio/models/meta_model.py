from __future__ import annotations

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from studio.db.base import Base


class MetaModel(Base):
    __tablename__ = "meta_models"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), index=True)
    full_name: Mapped[str | None] = mapped_column(String(512), nullable=True)
    edited: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    customised: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
