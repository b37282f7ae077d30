"""Database configuration and session management.

This module builds the asynchronous engine and session maker for PostgreSQL
using SQLAlchemy, plus a connection testing utility.
"""
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from app.core.config import get_settings

settings = get_settings()

try:
    async_engine = create_async_engine(
        settings.database_url,
        echo=settings.database_echo,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_timeout=settings.database_pool_timeout,
        pool_recycle=settings.database_pool_recycle,
        pool_pre_ping=True,
    )
except Exception:
    async_engine = None


if async_engine:
    async_session = async_sessionmaker(
        async_engine, class_=AsyncSession, expire_on_commit=False
    )
else:
    async_session = None

# Base for declarative models
Base = declarative_base()

engine = async_engine


async def test_connection_async():
    """Test the asynchronous database connection.

    Runs a trivial query on the engine and an ORM query on the drugs table.

    Returns:
        bool: True if the connection is successful, False otherwise.

    Example:
        ```python
        if await test_connection_async():
            print("Async database is connected")
        ```
    """
    if async_engine is None or async_session is None:
        return False

    try:
        async with async_engine.begin() as conn:
            result = await conn.execute(text("SELECT 1"))
            result.fetchall()

        from sqlalchemy import select

        from app.models.drug import Drug

        async with async_session() as session:
            result = await session.execute(select(Drug.id).limit(1))
            result.scalars().all()

        return True
    except Exception:
        return False


async def dispose_engine() -> None:
    """Close every pooled connection. Called on application shutdown."""
    if async_engine is not None:
        await async_engine.dispose()
