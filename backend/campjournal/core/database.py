"""
Database connection and session management.
Uses SQLAlchemy 2.0 async API.

The engine is built explicitly by `Database` at application startup and
stored on `app.state`; request handlers receive sessions through `get_db`.
"""
import logging
from datetime import datetime, timezone
from typing import AsyncIterator

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool

from campjournal.core.config import settings

logger = logging.getLogger(__name__)


def _pgbouncer_statement_name():
    """
    Returns empty string to force usage of anonymous prepared statements.
    Required for pgbouncer transaction pooling to avoid collisions.
    """
    return ""


def normalize_database_url(database_url: str) -> str:
    """Point plain postgres URLs at the asyncpg driver."""
    if database_url.startswith("postgres://"):
        return database_url.replace("postgres://", "postgresql+asyncpg://", 1)
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return database_url


def table_args(*args) -> tuple:
    """`__table_args__` with the configured schema appended."""
    return (*args, {"schema": settings.db_schema})


def fk(target: str) -> str:
    """Schema-qualify a "table.column" foreign key target."""
    if settings.db_schema:
        return f"{settings.db_schema}.{target}"
    return target


def _configure_sqlite(engine):
    """
    Enforce foreign keys and let SQLAlchemy emit BEGIN itself so that
    SAVEPOINTs behave as they do on Postgres.
    """
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


# Base class for models
Base = declarative_base()


class Database:
    """Owns the async engine and the session factory for one application."""

    def __init__(self, database_url: str = None, **engine_overrides):
        database_url = normalize_database_url(database_url or settings.DATABASE_URL)

        engine_kwargs = {"echo": settings.DEBUG}
        if database_url.startswith("postgresql+asyncpg"):
            engine_kwargs["connect_args"] = {
                "statement_cache_size": 0,
                "prepared_statement_name_func": _pgbouncer_statement_name,
            }
            if settings.DATABASE_POOL_SIZE == 0:
                logger.info("Disabling connection pooling (NullPool)")
                engine_kwargs["poolclass"] = NullPool
            else:
                engine_kwargs["pool_size"] = settings.DATABASE_POOL_SIZE
                engine_kwargs["max_overflow"] = settings.DATABASE_MAX_OVERFLOW
                engine_kwargs["pool_pre_ping"] = True
        engine_kwargs.update(engine_overrides)

        self.engine = create_async_engine(database_url, **engine_kwargs)
        if database_url.startswith("sqlite"):
            _configure_sqlite(self.engine)
        self.sessionmaker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    async def create_all(self):
        """Create tables (development and tests; production uses alembic)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self):
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self):
        """Close database connections."""
        await self.engine.dispose()


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """
    Dependency to get database session.
    Usage in FastAPI:
        @app.get("/")
        async def endpoint(db: AsyncSession = Depends(get_db)):
            ...
    """
    database: Database = request.app.state.db
    async with database.sessionmaker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def utcnow() -> datetime:
    """Timezone-aware current time, used as a client-side column default."""
    return datetime.now(timezone.utc)
