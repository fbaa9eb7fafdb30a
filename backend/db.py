import os
from typing import Any, Dict

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker


def _normalize_url(url: str) -> str:
    # Heroku-style URLs still use the legacy scheme SQLAlchemy 1.4+ rejects.
    if url.startswith("postgres://"):
        return "postgresql://" + url[len("postgres://"):]
    return url


def _connect_args(url: str) -> Dict[str, Any]:
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    if os.getenv("APP_ENV") == "production":
        return {"sslmode": "require"}
    return {}


def _enable_sqlite_foreign_keys(engine: Engine) -> None:
    """Turn on FK enforcement so ``ondelete="CASCADE"`` removes a user's rows in SQLite too."""

    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


DATABASE_URL = _normalize_url(os.getenv("DATABASE_URL", "sqlite:///./dev.db"))

engine = create_engine(
    DATABASE_URL,
    connect_args=_connect_args(DATABASE_URL),
    echo=os.getenv("SQL_ECHO", "false").lower() == "true",
    future=True,
)
if engine.dialect.name == "sqlite":
    _enable_sqlite_foreign_keys(engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)

Base = declarative_base()


def get_db():
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create the users, dependents, w2_forms and form1098s tables if missing."""
    from backend import db_models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def close_db() -> None:
    engine.dispose()
