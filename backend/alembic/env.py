"""Alembic environment.

DATABASE_URL comes from Pydantic settings (prompter.core.config.settings), the
same source the API uses. SQLite cannot ALTER most constraints in place, so
migrations are rendered in batch mode.
"""

from __future__ import annotations

from logging.config import fileConfig

from alembic import context

from prompter.core.config import settings
from prompter.db.base import Base
from prompter.db.session import create_db_engine

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Escape percent signs for the ConfigParser interpolation
config.set_main_option("sqlalchemy.url", settings.DATABASE_URL.replace("%", "%%"))

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    context.configure(
        url=settings.DATABASE_URL,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        render_as_batch=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    # same engine setup as the app (SQLite pragmas included)
    connectable = create_db_engine(settings.DATABASE_URL)

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=True,
        )

        with context.begin_transaction():
            context.run_migrations()

    connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
