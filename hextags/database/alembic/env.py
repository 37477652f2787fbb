# hextags/database/alembic/env.py
from __future__ import annotations

import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool, text
from sqlalchemy.engine import Connection

# --- Load app settings --------------------------------------------------------
from hextags.common.settings import get_settings
from hextags.database.core.main import build_engine
from hextags.database.models import Base

cfg = get_settings()

# --- Alembic Config -----------------------------------------------------------
alembic_config = context.config

if alembic_config.config_file_name is not None:
    fileConfig(alembic_config.config_file_name)

# Allow overriding via env var if desired; otherwise use Settings.
database_url = os.getenv("DATABASE_URL", cfg.database_url)

target_metadata = Base.metadata
version_table_schema = cfg.alembic_version_table_schema


def include_object(object, name, type_, reflected, compare_to):
    """Limit autogenerate to our schema when one is configured."""
    if type_ == "table" and cfg.db_schema:
        obj_schema = getattr(object, "schema", None)
        return obj_schema in {None, cfg.db_schema, version_table_schema}
    return True


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode (no DB connection)."""
    context.configure(
        url=database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        include_schemas=bool(cfg.db_schema),
        include_object=include_object,
        version_table_schema=version_table_schema,
    )

    with context.begin_transaction():
        context.run_migrations()


def _prepare_connection(conn: Connection) -> None:
    """Ensure the application schema exists on PostgreSQL."""
    if conn.dialect.name == "postgresql" and cfg.db_schema:
        conn.execute(text(f'CREATE SCHEMA IF NOT EXISTS "{cfg.db_schema}"'))
        conn.execute(text(f'SET search_path TO "{cfg.db_schema}", public'))


def run_migrations_online() -> None:
    """Run migrations in 'online' mode (with an Engine/Connection)."""
    connectable = build_engine(database_url, poolclass=pool.NullPool)

    with connectable.connect() as connection:
        _prepare_connection(connection)

        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            include_schemas=bool(cfg.db_schema),
            include_object=include_object,
            version_table_schema=version_table_schema,
            compare_type=True,
            compare_server_default=True,
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()


# Entrypoint selected by Alembic
if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
