"""
Async database access for UniRecords.

Request handlers get a session from ``get_db``. Work that runs outside the
handler's transaction (audit rows, the seed script) opens its own session
through ``session_scope`` so a failed request never takes those writes down
with it.
"""

from contextlib import asynccontextmanager
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker, AsyncEngine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool
from typing import Any, AsyncGenerator, AsyncIterator, Dict, Optional

from unirecords.core.config import settings

Base = declarative_base()

# Created on first use so importing models never opens a connection
_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def get_database_url() -> str:
    """DATABASE_URL with the async driver filled in for plain postgres URLs"""
    db_url = settings.DATABASE_URL
    if db_url.startswith("postgres://"):
        db_url = "postgresql://" + db_url[len("postgres://"):]
    if db_url.startswith("postgresql://"):
        db_url = db_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return db_url


def engine_options(db_url: str) -> Dict[str, Any]:
    """SQLite (tests, local runs) gets no pool; Postgres gets a bounded one"""
    if db_url.startswith("sqlite"):
        return {
            "connect_args": {"check_same_thread": False},
            "poolclass": NullPool,
        }
    return {
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_recycle": settings.DB_POOL_RECYCLE,
        "pool_pre_ping": True,
    }


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        db_url = get_database_url()
        _engine = create_async_engine(db_url, echo=settings.DB_ECHO, **engine_options(db_url))
    return _engine


def get_session_local() -> async_sessionmaker[AsyncSession]:
    """Session factory; objects stay readable after commit"""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _session_factory


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session. Services commit their own work; leftovers are flushed here."""
    async with get_session_local()() as session:
        try:
            yield session
            if session.new or session.dirty or session.deleted:
                await session.commit()
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def session_scope(
    factory: Optional[async_sessionmaker[AsyncSession]] = None,
) -> AsyncIterator[AsyncSession]:
    """Standalone unit of work: commit on success, roll back on error"""
    async with (factory or get_session_local())() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db():
    """Create all tables"""
    import unirecords.models  # noqa: F401 - register models on the metadata

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db():
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None
