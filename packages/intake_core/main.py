"""Process entrypoint for the intake API."""

from __future__ import annotations

from packages.intake_core.http_api import create_intake_app
from packages.intake_core.migrations import run_startup_migrations
from packages.intake_core.runtime import build_services
from packages.intake_shared.config import IntakeSettings, load_settings
from packages.intake_shared.http import run_app
from packages.intake_shared.logging import configure_logging, get_logger

_LOGGER = get_logger(__name__)


def configure_from_settings(settings: IntakeSettings) -> None:
    """Apply the ``logging`` subtree to the root logger."""
    configure_logging(
        level=settings.logging.level,
        json_output=settings.logging.json_output,
        service=settings.logging.service,
        environment=settings.logging.environment,
    )


def main() -> None:
    """Load settings, migrate, build services and serve HTTP until stopped."""
    settings = load_settings()
    configure_from_settings(settings)

    migration_result = None
    if settings.server.run_migrations_on_startup:
        migration_result = run_startup_migrations(settings=settings)

    services = build_services(settings)
    app = create_intake_app(settings=settings, services=services)
    _LOGGER.info(
        "intake startup completed: host=%s port=%s migrations_executed=%s",
        settings.server.host,
        settings.server.port,
        migration_result is not None,
    )
    run_app(
        app,
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.logging.level,
    )


if __name__ == "__main__":
    main()
