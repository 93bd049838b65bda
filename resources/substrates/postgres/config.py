"""Pydantic settings for the shared Postgres substrate."""

from __future__ import annotations

from typing import Literal
from urllib.parse import quote_plus

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from packages.intake_shared.config import (
    IntakeSettings,
    resolve_component_settings,
    resolve_secret,
)
from resources.substrates.postgres.component import RESOURCE_COMPONENT_ID


class PostgresSettings(BaseModel):
    """Connection, pool and probe settings for the shared Postgres engine."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    url: str | None = None
    host: str = "postgres"
    port: int = Field(default=5432, gt=0)
    database: str = "intake"
    user: str = "intake"
    password: str = ""
    password_env: str = ""
    pool_size: int = Field(default=5, gt=0)
    max_overflow: int = Field(default=10, ge=0)
    pool_timeout_seconds: float = Field(default=30.0, gt=0)
    pool_pre_ping: bool = True
    connect_timeout_seconds: float = Field(default=10.0, gt=0)
    health_timeout_seconds: float = Field(default=1.0, gt=0)
    sslmode: Literal[
        "disable", "allow", "prefer", "require", "verify-ca", "verify-full"
    ] = "prefer"

    @field_validator("pool_pre_ping", mode="before")
    @classmethod
    def _coerce_bool(cls, value: object) -> object:
        """Normalize boolean-like strings from env and YAML sources."""
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in {"true", "1", "yes", "on"}:
                return True
            if lowered in {"false", "0", "no", "off"}:
                return False
        return value

    @model_validator(mode="after")
    def _resolve_url(self) -> "PostgresSettings":
        """Build a psycopg URL from split fields when ``url`` is unset."""
        if self.url is not None and self.url.strip() != "":
            object.__setattr__(self, "url", self.url.strip())
            return self
        password = resolve_secret(
            inline=self.password,
            env_name=self.password_env,
            setting="substrate.postgres.password",
        )
        object.__setattr__(self, "password", password)
        object.__setattr__(self, "url", _build_url_from_parts(self))
        return self


def _build_url_from_parts(postgres: PostgresSettings) -> str:
    """Construct a SQLAlchemy psycopg URL from split settings."""
    host = postgres.host.strip()
    database = postgres.database.strip()
    user = postgres.user.strip()
    if host == "":
        raise ValueError("substrate.postgres.host is required when url is unset")
    if database == "":
        raise ValueError("substrate.postgres.database is required when url is unset")
    if user == "":
        raise ValueError("substrate.postgres.user is required when url is unset")

    auth = quote_plus(user)
    if postgres.password != "":
        auth += f":{quote_plus(postgres.password)}"
    return (
        f"postgresql+psycopg://{auth}@{host}:{postgres.port}/{quote_plus(database)}"
    )


def resolve_postgres_settings(settings: IntakeSettings) -> PostgresSettings:
    """Resolve Postgres substrate settings from ``components.substrate.postgres``."""
    return resolve_component_settings(
        settings=settings,
        component_id=RESOURCE_COMPONENT_ID,
        model=PostgresSettings,
    )
