"""Tests for startup migration selection and execution behavior."""

from __future__ import annotations

from pathlib import Path

import pytest
from alembic.config import Config

from packages.intake_core.migrations import (
    MigrationExecutionError,
    build_alembic_config,
    run_startup_migrations,
)
from packages.intake_shared.config import IntakeSettings

_PG_URL = "postgresql+psycopg://intake:p%40ss@db:5432/intake"


def _settings(*, quota_backend: str = "postgres") -> IntakeSettings:
    return IntakeSettings(
        components={
            "substrate": {"postgres": {"url": _PG_URL}},
            "service": {"quota_authority": {"backend": quota_backend}},
        }
    )


def test_run_startup_migrations_upgrades_each_state_service_to_head(
    tmp_path: Path,
) -> None:
    """Submission and quota migrations run in order with separate version tables."""
    calls: list[tuple[str, str, str]] = []

    def _upgrade(config: Config, revision: str) -> None:
        calls.append(
            (
                config.get_main_option("script_location") or "",
                config.get_main_option("version_table") or "",
                revision,
            )
        )

    result = run_startup_migrations(
        settings=_settings(), repo_root=tmp_path, upgrade_fn=_upgrade
    )

    assert result.executed_services == ("submission_authority", "quota_authority")
    assert result.skipped_services == ()
    assert calls == [
        (
            str(tmp_path / "services/state/submission_authority/migrations"),
            "alembic_version_submission_authority",
            "head",
        ),
        (
            str(tmp_path / "services/state/quota_authority/migrations"),
            "alembic_version_quota_authority",
            "head",
        ),
    ]


def test_quota_migrations_skipped_for_non_postgres_backend(tmp_path: Path) -> None:
    """Redis and memory quota backends own no tables."""
    executed: list[str] = []

    result = run_startup_migrations(
        settings=_settings(quota_backend="redis"),
        repo_root=tmp_path,
        upgrade_fn=lambda config, revision: executed.append(revision),
    )

    assert result.executed_services == ("submission_authority",)
    assert result.skipped_services == ("quota_authority",)
    assert executed == ["head"]


def test_run_startup_migrations_wraps_upgrade_failures(tmp_path: Path) -> None:
    """Alembic failures surface as MigrationExecutionError naming the service."""

    def _fail(config: Config, revision: str) -> None:
        del config, revision
        raise RuntimeError("boom")

    with pytest.raises(MigrationExecutionError, match="submission_authority") as info:
        run_startup_migrations(
            settings=_settings(), repo_root=tmp_path, upgrade_fn=_fail
        )

    assert isinstance(info.value.__cause__, RuntimeError)


def test_alembic_config_preserves_percent_escapes_in_url(tmp_path: Path) -> None:
    """URL-escaped passwords survive ConfigParser interpolation."""
    config = build_alembic_config(
        service_name="submission_authority",
        database_url=_PG_URL,
        repo_root=tmp_path,
    )

    assert config.get_main_option("sqlalchemy.url") == _PG_URL
