"""Startup migration orchestration for the intake state services."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from alembic import command
from alembic.config import Config

from packages.intake_shared.config import IntakeSettings
from packages.intake_shared.logging import get_logger
from resources.substrates.postgres import resolve_postgres_settings
from services.state.quota_authority.config import resolve_quota_authority_settings

_LOGGER = get_logger(__name__)

_REPO_ROOT = Path(__file__).resolve().parents[2]


class MigrationExecutionError(RuntimeError):
    """Raised when startup migration execution fails."""


@dataclass(frozen=True, slots=True)
class MigrationRunResult:
    """Summary of one startup migration pass."""

    executed_services: tuple[str, ...]
    skipped_services: tuple[str, ...]


def migration_services(
    settings: IntakeSettings,
) -> tuple[tuple[str, ...], tuple[str, ...]]:
    """Return ``(run, skipped)`` state service names in migration order.

    Quota tables only exist when the quota backend is Postgres.
    """
    run = ["submission_authority"]
    skipped: list[str] = []
    if resolve_quota_authority_settings(settings).backend == "postgres":
        run.append("quota_authority")
    else:
        skipped.append("quota_authority")
    return tuple(run), tuple(skipped)


def build_alembic_config(
    *,
    service_name: str,
    database_url: str,
    repo_root: Path | None = None,
) -> Config:
    """Build an in-memory alembic config for one service migration directory."""
    root = repo_root or _REPO_ROOT
    config = Config()
    config.set_main_option(
        "script_location",
        str(root / "services" / "state" / service_name / "migrations"),
    )
    # ConfigParser interpolation treats ``%`` specially; escaped passwords use it.
    config.set_main_option("sqlalchemy.url", database_url.replace("%", "%%"))
    config.set_main_option("version_table", f"alembic_version_{service_name}")
    return config


def run_startup_migrations(
    *,
    settings: IntakeSettings,
    repo_root: Path | None = None,
    upgrade_fn: Callable[[Config, str], None] = command.upgrade,
) -> MigrationRunResult:
    """Run Alembic upgrades to head for every state service that owns tables."""
    database_url = resolve_postgres_settings(settings).url or ""
    run, skipped = migration_services(settings)

    executed: list[str] = []
    for service_name in run:
        config = build_alembic_config(
            service_name=service_name,
            database_url=database_url,
            repo_root=repo_root,
        )
        try:
            upgrade_fn(config, "head")
        except Exception as exc:
            raise MigrationExecutionError(
                f"startup migration failed for service '{service_name}'"
            ) from exc
        executed.append(service_name)
        _LOGGER.info("migrations applied: service=%s", service_name)

    return MigrationRunResult(
        executed_services=tuple(executed),
        skipped_services=skipped,
    )
