"""
Database Connection Module

PostgreSQL access for the SQL collaborators (catalog, persistence,
routing) through one SQLAlchemy async engine. Only imported when
ENV_MODE selects those collaborators, so development mode never opens
a connection.
"""

import logging

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from app.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,  # SQL statements in debug mode
    pool_size=5,
    max_overflow=10,
    pool_pre_ping=True,
)

# Rows stay readable after commit (ids are returned to the flows)
async_session_maker = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass


async def init_db() -> None:
    """
    Create all tables in database.
    Called once at application startup and by scripts/seed.py.
    """
    import app.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("✅ Database tables created successfully!")


async def ping_database(session_factory=async_session_maker) -> bool:
    """Run a trivial query; False when the database is unreachable."""
    try:
        async with session_factory() as db:
            await db.execute(select(func.now()))
        return True
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        return False


async def close_db() -> None:
    await engine.dispose()
    logger.info("Database connections closed")
