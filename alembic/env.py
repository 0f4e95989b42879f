"""Alembic environment for the userhub schema (users, sessions).

Runs migrations over the async engine. The database URL comes from
``userhub.config.settings`` unless overridden on the command line, which is
how the test database gets migrated:

    alembic -x dburl=postgresql+asyncpg://userhub@localhost:5432/userhub_test upgrade head
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

import userhub.models  # noqa: F401 registers models with Base.metadata for autogenerate
from userhub.config import settings
from userhub.db.session import Base

config = context.config

database_url = context.get_x_argument(as_dictionary=True).get("dburl", settings.database_url)
config.set_main_option("sqlalchemy.url", database_url)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _configure(**kwargs: object) -> None:
    # compare_type: catch String length changes (e.g. users.name) on autogenerate
    context.configure(target_metadata=target_metadata, compare_type=True, **kwargs)


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of connecting: ``alembic upgrade head --sql``."""
    _configure(
        url=config.get_main_option("sqlalchemy.url"),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    _configure(connection=connection)

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """One-shot engine without pooling; disposed when the run ends."""
    connectable = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_async_migrations())
