"""Database engine and session construction.

The engine and session factory are built by the application lifespan and kept on
``app.state``; nothing here is created at import time.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

POOL_SIZE = 10
MAX_OVERFLOW = POOL_SIZE


def build_engine(database_uri: str) -> AsyncEngine:
    """Create the async engine for the given database URI.

    Pool tuning is only applied to PostgreSQL; sqlite engines (tests, local tooling)
    use SQLAlchemy's defaults.
    """
    if database_uri.startswith("postgresql"):
        return create_async_engine(
            database_uri,
            pool_size=POOL_SIZE,
            max_overflow=MAX_OVERFLOW,
            pool_pre_ping=True,
            pool_recycle=300,  # Recycle connections after 5 minutes
            pool_timeout=30,
            isolation_level="READ COMMITTED",
            connect_args={
                "server_settings": {
                    "idle_in_transaction_session_timeout": "60000",
                },
                "command_timeout": 60,
            },
        )
    return create_async_engine(database_uri)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create the session factory bound to ``engine``."""
    return async_sessionmaker(
        bind=engine, autocommit=False, autoflush=False, expire_on_commit=False
    )


@asynccontextmanager
async def get_db_context(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Get an async database session that can be used as a context manager.

    Example:
    -------
        async with get_db_context(app.state.session_factory) as db:
            await init_db(db, email_encryption=codec)

    """
    async with session_factory() as db:
        try:
            yield db
        finally:
            await db.close()
