from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from meetsync.config import get_settings

settings = get_settings()

# SQLite connections are shared across FastAPI's worker threads
engine = create_engine(
    settings.DATABASE_URL,
    connect_args={"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {},
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Iterator[Session]:
    """One session per request, closed once the response is sent."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
