"""Typed configuration models for intake runtime settings."""

from __future__ import annotations

from pathlib import Path
from typing import Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "intake" / "intake.yaml"


class LoggingSettings(BaseModel):
    """Structured logging configuration shared by all components."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    json_output: bool = True
    service: str = "intake"
    environment: str = "dev"


class AdminCredentialSettings(BaseModel):
    """One configured admin API credential and the identity it resolves to."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    token: str = Field(min_length=16)
    email: str = Field(min_length=3)
    roles: tuple[str, ...] = ()


class ProfileSettings(BaseModel):
    """Deployment identity: public URL, secrets and admin allowlist.

    A blank ``captcha_secret`` turns bot-check verification off.
    """

    site_url: str = "http://localhost:8000"
    continuation_secret: str = ""
    admin_emails: tuple[str, ...] = ()
    admin_credentials: tuple[AdminCredentialSettings, ...] = ()
    captcha_secret: str = ""
    captcha_local_bypass: bool = False

    @field_validator("site_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        """Normalize the public site URL used to build edit links."""
        return value.strip().rstrip("/")

    @field_validator("admin_emails", mode="before")
    @classmethod
    def _split_admin_emails(cls, value: object) -> object:
        """Accept a comma-separated string as well as a list."""
        if isinstance(value, str):
            return tuple(item.strip() for item in value.split(",") if item.strip())
        return value


class ServerSettings(BaseModel):
    """HTTP runtime settings for the intake API process."""

    host: str = "127.0.0.1"
    port: int = Field(default=8000, gt=0, lt=65536)
    run_migrations_on_startup: bool = True
    health_timeout_seconds: float = Field(default=2.0, gt=0)


class ComponentNamespaceSettings(BaseModel):
    """Namespace map for grouped settings under ``components.<kind>``."""

    model_config = ConfigDict(extra="allow")


class ComponentsSettings(BaseModel):
    """Typed ``components`` subtree with component-local extras."""

    model_config = ConfigDict(extra="allow")

    service: ComponentNamespaceSettings = Field(
        default_factory=ComponentNamespaceSettings
    )
    adapter: ComponentNamespaceSettings = Field(
        default_factory=ComponentNamespaceSettings
    )
    substrate: ComponentNamespaceSettings = Field(
        default_factory=ComponentNamespaceSettings
    )

    @model_validator(mode="before")
    @classmethod
    def _reject_flat_component_keys(cls, value: object) -> object:
        """Reject flat ``service_x`` keys in favor of ``service.x`` namespaces."""
        if not isinstance(value, dict):
            return value
        for key in value:
            if isinstance(key, str) and key.startswith(
                ("service_", "adapter_", "substrate_")
            ):
                kind, _, name = key.partition("_")
                raise ValueError(
                    f"components.{key} is invalid; use components.{kind}.{name} instead"
                )
        return value


class IntakeSettings(BaseSettings):
    """Root runtime settings resolved from init/env/yaml/defaults sources."""

    model_config = SettingsConfigDict(
        env_prefix="INTAKE_",
        env_nested_delimiter="__",
        extra="ignore",
        nested_model_default_partial_update=True,
        yaml_file=DEFAULT_CONFIG_PATH,
        yaml_file_encoding="utf-8",
    )

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    profile: ProfileSettings = Field(default_factory=ProfileSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    components: ComponentsSettings = Field(default_factory=ComponentsSettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Apply precedence: init > env > yaml > defaults."""
        del dotenv_settings, file_secret_settings
        return (init_settings, env_settings, YamlConfigSettingsSource(settings_cls))


TComponentSettings = TypeVar("TComponentSettings", bound=BaseModel)


def resolve_component_settings(
    *,
    settings: IntakeSettings,
    component_id: str,
    model: type[TComponentSettings],
) -> TComponentSettings:
    """Resolve one component settings object from ``components.<kind>.<name>``."""
    kind, separator, name = component_id.partition("_")
    if not separator or kind not in {"service", "adapter", "substrate"}:
        raise ValueError(f"component id '{component_id}' has no known kind prefix")

    namespace = settings.components.model_dump(mode="python").get(kind, {})
    if not isinstance(namespace, dict):
        raise TypeError(f"components.{kind} must resolve to an object mapping")
    resolved = namespace.get(name, {})
    if not isinstance(resolved, dict):
        raise TypeError(f"components.{kind}.{name} must resolve to an object mapping")
    return model.model_validate(resolved)
