"""
Alembic environment for Leadlens.
Reads the database URL from DATABASE_URL or the application config.
"""

import os
import sys
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from sqlalchemy import engine_from_config, pool

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from core.config import get_config
from modules.database.models import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

app_config = get_config()
config.set_main_option(
    "sqlalchemy.url",
    os.getenv("DATABASE_URL") or app_config.database_url or app_config.database_url_from_parts
)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Emit SQL without a live connection."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations against the configured database."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
