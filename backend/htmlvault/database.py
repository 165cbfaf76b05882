"""
HTMLVault Backend — Database Handle & Session Management
==========================================================

What:  Async SQLAlchemy engine (connection pool), session factory, declarative
       base and the FastAPI session dependency.
How:   `Database` wraps one async engine. The app factory constructs it,
       stores it on `app.state.database`, and the lifespan disposes it on
       shutdown. Routes receive a session through `get_db_session`, which
       pulls the handle off the running app, so there is no module-level
       engine.
Who:   The app factory (lifecycle), routes (sessions), health check (ping).

Connection Pooling (PostgreSQL via asyncpg):
    pool_size=10:      Persistent connections for normal load
    max_overflow=5:    Temporary connections for traffic spikes
    pool_pre_ping:     Validates connections before use
    pool_recycle=3600: Recycles connections every hour

    SQLite URLs (used by the test suite) keep SQLAlchemy's default pool,
    which does not accept the sizing arguments.
"""

import logging
import ssl
from typing import AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from htmlvault.config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object between startup table creation and
    Alembic.
    """
    pass


def insecure_ssl_context() -> ssl.SSLContext:
    """
    TLS context that encrypts the connection but accepts any server certificate.
    """
    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context


class Database:
    """
    Owns the async engine and its connection pool.

    Args:
        url:            SQLAlchemy async URL (postgresql+asyncpg://, sqlite+aiosqlite://)
        pool_size:      Persistent pooled connections (PostgreSQL only)
        max_overflow:   Burst connections above pool_size (PostgreSQL only)
        pool_pre_ping:  Test connections on checkout (PostgreSQL only)
        ssl_enabled:    Use TLS without certificate verification (PostgreSQL only)
        echo:           Log every SQL statement
    """

    def __init__(
        self,
        url: str,
        *,
        pool_size: int = 10,
        max_overflow: int = 5,
        pool_pre_ping: bool = True,
        ssl_enabled: bool = False,
        echo: bool = False,
    ):
        self.url: URL = make_url(url)
        engine_kwargs = {"echo": echo}

        if self.url.get_backend_name() == "postgresql":
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_pre_ping=pool_pre_ping,
                pool_recycle=3600,
            )
            if ssl_enabled:
                # asyncpg takes an SSLContext; a libpq-style sslmode query
                # parameter would be forwarded as an unknown keyword.
                self.url = self.url.difference_update_query(["sslmode"])
                engine_kwargs["connect_args"] = {"ssl": insecure_ssl_context()}

        self.engine: AsyncEngine = create_async_engine(self.url, **engine_kwargs)

        # expire_on_commit=False: returned rows stay readable after commit
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            ssl_enabled=settings.db_ssl,
            echo=settings.log_level == "DEBUG",
        )

    async def create_tables(self) -> None:
        """
        Creates every mapped table that does not exist yet.

        Equivalent to CREATE TABLE IF NOT EXISTS; safe on every startup.
        """
        # Registers the models on Base.metadata
        from htmlvault.models import content  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Table created or already exists")

    async def ping(self) -> None:
        """Runs SELECT 1; raises if the database is unreachable."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def dispose(self) -> None:
        """Closes every pooled connection."""
        await self.engine.dispose()
        logger.info("Database connection pool closed")


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Takes the `Database` handle the app factory attached to app.state
        2. Opens a session and yields it to the route handler
        3. On error: rolls back, then re-raises for the global handlers
        4. Always: closes the session, returning its connection to the pool

    Writes are committed by the service right after their statement, so a
    failed commit is reported as a storage error for that operation.
    """
    database: Optional[Database] = getattr(request.app.state, "database", None)
    if database is None:
        raise RuntimeError("Database handle is not attached to the application")

    async with database.session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
