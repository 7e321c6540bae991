"""
Database Connection Module

This module handles the database connection and ORM base for the review
store that the OrgPulse analytics engine reads from, using SQLAlchemy.
Supports PostgreSQL, MySQL/MariaDB and SQLite.
"""

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from config import get_database_url as _configured_database_url

load_dotenv()

__version__ = "0.1.0"
__author__ = "OrgPulse Team"

DATABASE_URL = _configured_database_url()


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    # Connection pooling and timeout settings for server databases
    return {
        "pool_size": 10,
        "max_overflow": 20,
        "pool_pre_ping": True,  # Verify connections before use
        "pool_recycle": 3600,  # Recycle connections every hour
        "pool_timeout": 30,
    }


# Engine creation is lazy; no connection is opened until first use
engine = create_engine(DATABASE_URL, echo=False, **_engine_options(DATABASE_URL))

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Create declarative base
Base = declarative_base()


# Dependency to get database session
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_database_url():
    """Get the database URL for external modules."""
    return DATABASE_URL


# Async drivers used for each backend when the configured URL names a sync one
ASYNC_DRIVERS = {
    "sqlite": "aiosqlite",
    "postgresql": "asyncpg",
    "mysql": "aiomysql",
}

_async_session_factory = None


def get_async_database_url(url: str = None) -> str:
    """Rewrite a database URL to use the async driver of its backend."""
    parsed = make_url(url or DATABASE_URL)
    backend = parsed.get_backend_name()
    if backend not in ASYNC_DRIVERS:
        raise ValueError(f"No async driver known for database backend '{backend}'")
    if parsed.get_driver_name() == ASYNC_DRIVERS[backend]:
        return parsed.render_as_string(hide_password=False)
    return parsed.set(drivername=f"{backend}+{ASYNC_DRIVERS[backend]}").render_as_string(
        hide_password=False
    )


def get_async_session_factory():
    """Session factory bound to an async engine on DATABASE_URL, created on first use."""
    global _async_session_factory

    if _async_session_factory is None:
        async_url = get_async_database_url()
        options = {} if async_url.startswith("sqlite") else _engine_options(async_url)
        async_engine = create_async_engine(async_url, echo=False, **options)
        _async_session_factory = sessionmaker(
            async_engine, class_=AsyncSession, expire_on_commit=False
        )

    return _async_session_factory
