"""Settings loading entrypoint.

Precedence is always init kwargs, then ``INTAKE_`` environment variables
(``__`` separates nesting, e.g. ``INTAKE_LOGGING__LEVEL=DEBUG``), then the
YAML config file, then built-in defaults. ``INTAKE_CONFIG_FILE`` selects the
YAML file when no explicit path is passed.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic_settings import SettingsConfigDict

from .models import DEFAULT_CONFIG_PATH, IntakeSettings

CONFIG_FILE_ENV = "INTAKE_CONFIG_FILE"


def resolve_config_path(config_path: str | Path | None = None) -> Path:
    """Return the YAML config path from argument, environment or default."""
    if config_path is not None:
        return Path(config_path).expanduser()
    from_env = os.environ.get(CONFIG_FILE_ENV, "").strip()
    if from_env:
        return Path(from_env).expanduser()
    return DEFAULT_CONFIG_PATH


def load_settings(
    *,
    config_path: str | Path | None = None,
    **overrides: Any,
) -> IntakeSettings:
    """Load typed settings reading YAML from the resolved config path."""
    path = resolve_config_path(config_path)

    class _FileScopedSettings(IntakeSettings):
        model_config = SettingsConfigDict(yaml_file=path)

    return _FileScopedSettings(**overrides)
