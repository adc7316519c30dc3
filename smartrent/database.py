"""
Async SQLAlchemy engine, session factory and declarative base.

Production runs on PostgreSQL through asyncpg; tests and quick local runs may
point DATABASE_URL at SQLite through aiosqlite.
"""

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy import text, DateTime, Uuid, func
from smartrent.config import settings, Settings
from datetime import datetime, timezone
from typing import AsyncGenerator
import logging
import uuid

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def engine_options(config: Settings) -> dict:
    """
    Keyword arguments for create_async_engine.

    SQLite gets no pool tuning; PostgreSQL gets the configured pool and an
    application_name so connections are identifiable in pg_stat_activity.
    """
    options = {"echo": config.debug}
    if config.is_sqlite:
        return options

    options.update(
        pool_size=config.db_pool_size,
        max_overflow=config.db_max_overflow,
        pool_recycle=config.db_pool_recycle,
        pool_timeout=config.db_pool_timeout,
        pool_pre_ping=True,
        connect_args={"server_settings": {"application_name": "smartrent_api"}},
    )
    return options


engine = create_async_engine(settings.database_url, **engine_options(settings))

AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    """Declarative base: every table has a UUID primary key and UTC created/updated stamps."""

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
        index=True
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(id={self.id})>"


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request, rolled back if the handler raises."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def check_database_connection() -> bool:
    """Run `SELECT 1`; used at startup and by /health."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        return False

    logger.debug("Database connection successful")
    return True


async def create_tables() -> None:
    """Create every table registered on Base.metadata. Used by manage.py."""
    import smartrent.models  # noqa: F401  registers the mappers

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"Created tables: {', '.join(sorted(Base.metadata.tables))}")


async def drop_tables() -> None:
    """Drop every table. Refused outside development and testing."""
    if not (settings.is_testing or settings.is_development):
        raise RuntimeError(f"Refusing to drop tables in {settings.environment} environment")

    import smartrent.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    logger.warning("Dropped all tables")


async def close_db_connection() -> None:
    """Dispose of the engine's pool on shutdown."""
    await engine.dispose()
    logger.info("Database connections closed")
