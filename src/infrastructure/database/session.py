"""Database engine and session factory for the account store."""

from typing import Any, AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from core.config import settings


def _engine_options(url: str) -> dict[str, Any]:
    """Pool and driver options for the configured database."""
    if url.startswith("sqlite"):
        # Local runs against aiosqlite; SQLite has no server-side pool to size
        return {}

    options: dict[str, Any] = {
        "pool_pre_ping": True,
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
    }
    # Supavisor runs in transaction mode, which breaks asyncpg's
    # prepared statement cache.
    if "pooler.supabase.com" in url:
        options["connect_args"] = {"statement_cache_size": 0}
    return options


engine = create_async_engine(
    settings.async_database_url,
    echo=settings.debug,
    **_engine_options(settings.async_database_url),
)

async_session_factory = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency yielding a session for raw checks such as health probes."""
    async with async_session_factory() as session:
        yield session
