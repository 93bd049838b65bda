"""Alembic environment for Submission Authority Service tables."""

from resources.substrates.postgres.migration_env import run_alembic_env
from services.state.submission_authority.data.schema import metadata

run_alembic_env(target_metadata=metadata)
