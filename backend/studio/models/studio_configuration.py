from __future__ import annotations

from sqlalchemy import Text
from sqlalchemy.orm import Mapped, mapped_column

from studio.db.base import Base


class StudioConfiguration(Base):
    __tablename__ = "studio_configurations"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    build_cmd: Mapped[str | None] = mapped_column(Text, nullable=True)
