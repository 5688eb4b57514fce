"""
Async SQLAlchemy engine + session factory.

Production runs against MySQL through the aiomysql driver; the test suite
points DATABASE_URL at an aiosqlite file. The engine is created once at
import time and reused across all requests.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from blog_api.config import settings

logger = logging.getLogger(__name__)


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # SQLite connections are cheap and must not be shared across event loops
        return {"poolclass": NullPool}
    return {"pool_pre_ping": True, "pool_size": 20, "max_overflow": 10}


engine = create_async_engine(
    settings.sqlalchemy_url,
    echo=False,
    **_engine_options(settings.sqlalchemy_url),
)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass


async def init_db() -> None:
    """Create all tables if they don't exist (idempotent)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialised")


async def get_db():
    """FastAPI dependency that yields an async DB session."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
