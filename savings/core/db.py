"""Shared SQLAlchemy engine and session factory."""

from typing import Any, Dict

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker

from savings.core.config import settings


def engine_options(database_url: str) -> Dict[str, Any]:
    """Timeouts for the pool and for each statement, per backend."""
    backend = make_url(database_url).get_backend_name()

    if backend == "sqlite":
        # sqlite3 busy timeout is in seconds
        return {
            "connect_args": {
                "check_same_thread": False,
                "timeout": settings.DB_STATEMENT_TIMEOUT_MS / 1000,
            }
        }

    options: Dict[str, Any] = {
        "pool_pre_ping": True,
        "pool_timeout": settings.DB_POOL_TIMEOUT_SECONDS,
    }
    if backend == "postgresql":
        options["connect_args"] = {
            "connect_timeout": settings.DB_POOL_TIMEOUT_SECONDS,
            "options": f"-c statement_timeout={settings.DB_STATEMENT_TIMEOUT_MS}",
        }
    return options


def build_engine(database_url: str) -> Engine:
    return create_engine(database_url, **engine_options(database_url))


engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
