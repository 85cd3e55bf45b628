from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from studio.core.config import get_settings

settings = get_settings()

engine = create_engine(settings.database_url, pool_pre_ping=True)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
