from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from apps.api.config import Settings


class Base(DeclarativeBase):
    """Base class for all database models.

    Every model inherits from this. SQLAlchemy uses this to track
    all the models and generate the correct SQL for table creation.
    """
    pass


def create_engine(settings: Settings) -> AsyncEngine:
    """Create the engine that owns the connection pool.

    A pool keeps connections open and reuses them, so we don't
    reconnect for every request. Created once per process in the lifespan.
    """
    if not settings.database_url:
        raise ValueError("database_url is not configured")

    return create_async_engine(
        settings.database_url,
        echo=settings.debug,  # When True, prints all SQL queries
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=True,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory used by the repositories.

    expire_on_commit=False means objects stay usable after commit
    (otherwise reading document.content after commit would hit the DB again).
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
