from __future__ import annotations

from fastapi import APIRouter
from sqlalchemy import text

from studio.db.session import engine

router = APIRouter(tags=["health"])


@router.get("/health")
def health() -> dict[str, str]:
    with engine.connect() as connection:
        connection.execute(text("select 1"))
    return {"status": "ok"}
