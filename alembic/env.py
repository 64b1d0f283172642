"""Migrations for the Apiary schema (beekeepers, hives, queens).

Run from the project root:
    APIARY_DATABASE_URL=postgresql+asyncpg://.../apiary alembic upgrade head

The target database is whatever ``Settings.database_url`` resolves to, so the
server and its migrations can never point at different databases; the URL in
alembic.ini is ignored.  The same env drives PostgreSQL (asyncpg) and local
SQLite (aiosqlite) databases.
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection, make_url
from sqlalchemy.ext.asyncio import create_async_engine

from alembic import context

config = context.config

# Logger levels for alembic and sqlalchemy come from alembic.ini
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Autogenerate compares the database against the Apiary models
from apiary.db.models import Base  # noqa: E402

target_metadata = Base.metadata

from apiary.config import get_settings  # noqa: E402

settings = get_settings()
config.set_main_option("sqlalchemy.url", settings.database_url)

# SQLite cannot alter constraints in place; revisions run in batch mode there
use_batch = make_url(settings.database_url).get_backend_name() == "sqlite"


def do_run_migrations(connection: Connection) -> None:
    """Run the pending revisions on *connection*."""
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        render_as_batch=use_batch,
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """Apply migrations over a single unpooled async connection."""
    connectable = create_async_engine(
        settings.database_url,
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_migrations_offline() -> None:
    """Print the migration SQL instead of executing it (``alembic upgrade --sql``)."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        render_as_batch=use_batch,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply migrations to the configured database."""
    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
