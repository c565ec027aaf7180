"""Async engine, session factory and the request-scoped session dependency."""

from typing import Any, AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from core.config import settings

_POOLER_HOSTS = ("pooler.supabase.com", "supabase.com")


def connect_args_for(url: str) -> dict[str, Any]:
    """Driver arguments for the given database URL.

    Supavisor runs in transaction mode, which breaks asyncpg's prepared
    statement cache, so the cache is turned off for pooled Supabase hosts.
    """
    if any(host in url for host in _POOLER_HOSTS):
        return {"statement_cache_size": 0}
    return {}


engine = create_async_engine(
    settings.async_database_url,
    echo=settings.debug,
    pool_pre_ping=True,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_timeout=settings.db_pool_timeout,
    connect_args=connect_args_for(settings.database_url),
)

async_session_factory = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a session for read-only endpoints such as the health check.

    Writes go through ``SQLAlchemyUnitOfWork``; anything left open here is
    rolled back when the request fails.
    """
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
