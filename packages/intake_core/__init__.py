"""Public API for intake process startup, routing and health."""

from packages.intake_core.auth import (
    AdminDecision,
    AdminGate,
    AdminIdentityResolver,
    StaticTokenAdminResolver,
)
from packages.intake_core.health import (
    ComponentHealthResult,
    IntakeHealthResult,
    evaluate_intake_health,
)
from packages.intake_core.http_api import create_intake_app, register_routes
from packages.intake_core.migrations import (
    MigrationExecutionError,
    MigrationRunResult,
    run_startup_migrations,
)
from packages.intake_core.runtime import IntakeServices, build_services

__all__ = [
    "AdminDecision",
    "AdminGate",
    "AdminIdentityResolver",
    "ComponentHealthResult",
    "IntakeHealthResult",
    "IntakeServices",
    "MigrationExecutionError",
    "MigrationRunResult",
    "StaticTokenAdminResolver",
    "build_services",
    "create_intake_app",
    "evaluate_intake_health",
    "register_routes",
    "run_startup_migrations",
]
