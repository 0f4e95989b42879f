from collections.abc import AsyncGenerator

from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from userhub.config import settings

# Naming conventions for database constraints.
# Without these, Alembic can't autogenerate consistent constraint names across migrations.
NAMING_CONVENTION: dict[str, str] = {
    "ix": "ix_%(column_0_label)s",  # Index
    "uq": "uq_%(table_name)s_%(column_0_name)s",  # Unique constraint
    "ck": "ck_%(table_name)s_%(constraint_name)s",  # Check constraint
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",  # Foreign key
    "pk": "pk_%(table_name)s",  # Primary key
}


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models.

    The naming_convention ensures all constraints have predictable names,
    which is critical for Alembic migrations to work correctly.
    """

    metadata = MetaData(naming_convention=NAMING_CONVENTION)


# Async engine with connection pooling, shared by every repository.
engine = create_async_engine(
    settings.database_url,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_timeout=settings.db_pool_timeout,
    pool_recycle=settings.db_pool_recycle,
    pool_pre_ping=settings.db_pool_pre_ping,
    echo=settings.db_echo,
    # asyncpg driver options, passed directly to asyncpg.connect()
    connect_args={"command_timeout": settings.db_statement_timeout},
)

# Session factory: repositories open one short-lived session per operation.
# expire_on_commit=False keeps returned models readable after the transaction closes,
# which matters in async code where a lazy refresh would need sync I/O.
async_session = async_sessionmaker(engine, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that provides a database session per request.

    Only used by endpoints that talk to the database directly (the health
    check). Commits on success, rolls back on exception.
    """
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def shutdown() -> None:
    """Close all pooled database connections. Called from the app lifespan."""
    await engine.dispose()
