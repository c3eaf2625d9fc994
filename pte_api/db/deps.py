# pte_api/db/deps.py
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from pte_api.core.config import settings

engine_kwargs = {"echo": settings.SQL_ECHO}
if not settings.DATABASE_URL.startswith("sqlite"):
    # Managed Postgres drops idle connections
    engine_kwargs.update(pool_pre_ping=True, pool_recycle=1800)

engine = create_async_engine(settings.DATABASE_URL, **engine_kwargs)
AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
Base = declarative_base()


async def get_db() -> AsyncIterator[AsyncSession]:
    """One session per request; rolled back if the handler raises."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
