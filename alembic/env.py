"""
Alembic Migration Environment
==============================

What:  Applies the storyboard migrations over an async connection.
How:   The target URL is DATABASE_URL from storyboard.config unless the
       caller already set `sqlalchemy.url` on the Alembic config (tests
       point it at a scratch database). Only online migrations are
       supported; `--sql` script generation is refused.
Who:   `alembic upgrade head`, `alembic revision --autogenerate`.
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine
from alembic import context

from storyboard.config import settings
from storyboard.database import Base

# Registers the parts table with Base.metadata for --autogenerate
from storyboard.models.part import Part  # noqa: F401

config = context.config

if config.config_file_name is not None:
    # Keep the application's loggers alive when run in-process
    fileConfig(config.config_file_name, disable_existing_loggers=False)

database_url = config.get_main_option("sqlalchemy.url") or settings.database_url


def _apply(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=Base.metadata,
        # SQLite cannot ALTER most things in place
        render_as_batch=connection.dialect.name == "sqlite",
    )
    with context.begin_transaction():
        context.run_migrations()


async def _migrate() -> None:
    engine = create_async_engine(database_url, poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_apply)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    raise SystemExit("Offline (--sql) migrations are not supported; run against a database.")

asyncio.run(_migrate())
