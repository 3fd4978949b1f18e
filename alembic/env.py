"""
Alembic Migration Environment
===============================

What:  Runs migrations for the book review schema against the async engine.
How:   Reads the URL from application settings and drives Alembic through
       `connection.run_sync()`.
Who:   Called by `alembic` CLI commands (upgrade, downgrade, revision).

Only the base tables (`books`, `reviews`) are on `Base.metadata`. The
`books_with_ratings` view is created with raw DDL in the migrations and is
invisible to --autogenerate.
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.ext.asyncio import async_engine_from_config
from alembic import context

from bookreview.config import settings
from bookreview.database import Base

# Models register their tables on Base.metadata at import
from bookreview.models.book import Book  # noqa: F401
from bookreview.models.review import Review  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

# Settings are the single source of the database URL, not alembic.ini
config.set_main_option("sqlalchemy.url", settings.database_url)


def include_object(obj, name, type_, reflected, compare_to):
    """Keep autogenerate from proposing to drop the aggregate view."""
    if type_ == "table" and name == "books_with_ratings":
        return False
    return True


def run_migrations_offline() -> None:
    """Emit SQL to stdout without connecting to the database."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        include_object=include_object,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection):
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        include_object=include_object,
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """Connect with an unpooled async engine and apply pending migrations."""
    connectable = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_migrations_online() -> None:
    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
