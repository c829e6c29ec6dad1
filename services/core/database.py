"""
Database Configuration Module
Async SQLAlchemy engine and session factory
"""
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base

from agent_settings import DATABASE_URL

_engine_options = {"echo": False}
if not DATABASE_URL.startswith("sqlite"):
    _engine_options.update(
        pool_pre_ping=True,              # Verify connections before use
        pool_recycle=3600,               # Recycle connections after 1 hour
    )

engine = create_async_engine(DATABASE_URL, **_engine_options)

# Async session factory
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
    autocommit=False
)

# Base for models
Base = declarative_base()


async def create_tables(bind=None) -> None:
    """Create all tables registered on Base (idempotent)."""
    import models  # noqa: F401  registers tables on Base.metadata

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db_connections():
    """
    Gracefully close all database connections.
    Call this on application shutdown.
    """
    await engine.dispose()
