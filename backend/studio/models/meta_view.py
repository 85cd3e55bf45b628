from __future__ import annotations

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from studio.db.base import Base


class MetaView(Base):
    __tablename__ = "meta_views"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), index=True)
    type: Mapped[str] = mapped_column(String(64), index=True)
    xml_id: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    model: Mapped[str | None] = mapped_column(String(512), nullable=True)
    module: Mapped[str | None] = mapped_column(String(255), nullable=True)
    priority: Mapped[int] = mapped_column(Integer, default=20)
    title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    xml: Mapped[str | None] = mapped_column(Text, nullable=True)
