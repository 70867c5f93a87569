from typing import Optional

from sqlalchemy.orm import declarative_base
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from config import settings

Base = declarative_base()

engine: Optional[AsyncEngine] = None


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Create the process-wide engine on first use and return a session factory bound to it."""
    global engine
    if engine is None:
        engine = create_async_engine(
            settings.db_async_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout,
            pool_pre_ping=True,
        )
    return async_sessionmaker(engine, expire_on_commit=False)


async def dispose_engine() -> None:
    global engine
    if engine is not None:
        await engine.dispose()
        engine = None
