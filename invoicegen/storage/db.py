# ==== DATABASE CONNECTION AND SESSION MANAGEMENT ==== #

"""
Database connection and session management for InvoiceGen.

Async SQLAlchemy engine and session factory backing the document store.
PostgreSQL (asyncpg) is used in deployments; any async SQLAlchemy URL works.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    create_async_engine,
    async_sessionmaker,
    AsyncSession,
    AsyncEngine
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool, StaticPool

from invoicegen.settings import settings
from invoicegen.observability.metrics import db_connections_active


# ==== SQLALCHEMY CONFIGURATION ==== #

# SQLAlchemy base for model definitions
Base = declarative_base()

# Global engine and session factory instances
engine: AsyncEngine | None = None
SessionLocal: async_sessionmaker[AsyncSession] | None = None


def _normalize_url(db_url: str) -> str:
    """Force the asyncpg driver on plain PostgreSQL URLs."""
    if db_url.startswith("postgresql+asyncpg://"):
        return db_url

    db_url = db_url.replace("postgresql+psycopg://", "postgresql+asyncpg://")
    db_url = db_url.replace("postgresql://", "postgresql+asyncpg://")
    db_url = db_url.replace("postgres://", "postgresql+asyncpg://")

    # asyncpg takes ssl, not sslmode
    if "sslmode=require" in db_url:
        db_url = db_url.replace("sslmode=require", "ssl=require")

    return db_url


# ==== DATABASE INITIALIZATION ==== #

def init_database(db_url: str | None = None) -> None:
    """
    Initialize database engine and session factory.

    Args:
        db_url: Override for ``settings.DATABASE_URL``
    """
    global engine, SessionLocal

    if engine is not None:
        return

    db_url = _normalize_url(db_url or settings.DATABASE_URL)

    if db_url.startswith("sqlite"):
        # A single shared connection keeps in-memory databases alive
        engine = create_async_engine(
            db_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        is_pooler = "pooler" in db_url
        engine = create_async_engine(
            db_url,
            echo=settings.APP_ENV == "dev",
            # Use NullPool for PgBouncer to avoid double pooling
            poolclass=NullPool if is_pooler else None,
            pool_pre_ping=True,
        )

    SessionLocal = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def create_schema() -> None:
    """Create all tables known to the metadata (tests and local runs)."""
    from invoicegen.storage import models  # noqa: F401  registers tables

    if engine is None:
        init_database()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session with automatic commit/rollback.

    Yields:
        AsyncSession: Database session
    """
    if SessionLocal is None:
        init_database()

    async with SessionLocal() as session:
        try:
            db_connections_active.inc()
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            db_connections_active.dec()


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions.

    Yields:
        AsyncSession: Database session for request handling
    """
    async with get_session() as session:
        yield session


async def close_database() -> None:
    """Close database connections on shutdown."""
    global engine, SessionLocal
    if engine is not None:
        await engine.dispose()
        engine = None
        SessionLocal = None
