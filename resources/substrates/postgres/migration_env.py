"""Alembic ``env.py`` body shared by every service migration directory.

Each service keeps its own ``migrations/env.py`` that calls
``run_alembic_env`` with its table metadata. The database URL and the
per-service version table come from the programmatic alembic ``Config``
built at startup.
"""

from __future__ import annotations

from alembic import context
from sqlalchemy import MetaData, engine_from_config, pool

DEFAULT_VERSION_TABLE = "alembic_version"


def run_alembic_env(*, target_metadata: MetaData) -> None:
    """Run offline or online migrations for the current alembic invocation."""
    config = context.config
    url = config.get_main_option("sqlalchemy.url")
    version_table = config.get_main_option("version_table") or DEFAULT_VERSION_TABLE

    if context.is_offline_mode():
        context.configure(
            url=url,
            target_metadata=target_metadata,
            version_table=version_table,
            literal_binds=True,
        )
        with context.begin_transaction():
            context.run_migrations()
        return

    connectable = config.attributes.get("connection")
    if connectable is not None:
        _run_online(connectable, target_metadata, version_table)
        return

    engine = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with engine.connect() as connection:
        _run_online(connection, target_metadata, version_table)
    engine.dispose()


def _run_online(connection, target_metadata: MetaData, version_table: str) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        version_table=version_table,
    )
    with context.begin_transaction():
        context.run_migrations()
