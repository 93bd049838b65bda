"""Alembic environment for Quota Authority Service tables."""

from resources.substrates.postgres.migration_env import run_alembic_env
from services.state.quota_authority.data.schema import metadata

run_alembic_env(target_metadata=metadata)
