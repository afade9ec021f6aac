"""
Engine and session wiring for the loan store.
Routers receive sessions through `get_db`; nothing else opens one.
"""
from typing import Any, Iterator
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from app.core.config import settings
from app.core.logger import logger

IS_SQLITE = settings.DATABASE_URL.startswith("sqlite")

engine = create_engine(
    settings.DATABASE_URL,
    # sync routes run in a threadpool, so one SQLite connection may cross threads
    connect_args={"check_same_thread": False} if IS_SQLITE else {}
)

if IS_SQLITE:
    @event.listens_for(engine, "connect")
    def enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
        # SQLite ignores REFERENCES clauses unless asked; schedule rows must point at a loan
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Iterator[Session]:
    """One session per request, closed when the response is sent."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Creates the users, loans and amortization_schedules tables if missing."""
    from app.auth import models as auth_models  # noqa: F401
    from app.loans import models as loan_models  # noqa: F401

    logger.info(f"Creating tables: {', '.join(sorted(Base.metadata.tables))}")
    Base.metadata.create_all(bind=engine)
    logger.info("Database schema ready")
