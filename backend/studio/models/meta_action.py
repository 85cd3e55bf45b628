from __future__ import annotations

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from studio.db.base import Base


class MetaAction(Base):
    __tablename__ = "meta_actions"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), index=True)
    type: Mapped[str] = mapped_column(String(64))
    model: Mapped[str | None] = mapped_column(String(512), nullable=True)
    module: Mapped[str | None] = mapped_column(String(255), nullable=True)
    xml: Mapped[str | None] = mapped_column(Text, nullable=True)
