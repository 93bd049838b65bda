"""Public API for shared intake configuration utilities."""

from .loader import CONFIG_FILE_ENV, load_settings, resolve_config_path
from .secrets import resolve_secret
from .models import (
    DEFAULT_CONFIG_PATH,
    AdminCredentialSettings,
    ComponentsSettings,
    IntakeSettings,
    LoggingSettings,
    ProfileSettings,
    ServerSettings,
    resolve_component_settings,
)

__all__ = [
    "CONFIG_FILE_ENV",
    "DEFAULT_CONFIG_PATH",
    "AdminCredentialSettings",
    "ComponentsSettings",
    "IntakeSettings",
    "LoggingSettings",
    "ProfileSettings",
    "ServerSettings",
    "load_settings",
    "resolve_component_settings",
    "resolve_config_path",
    "resolve_secret",
]
