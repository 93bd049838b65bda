"""Pydantic settings for the Redis substrate component."""

from __future__ import annotations

from urllib.parse import quote_plus

from pydantic import BaseModel, ConfigDict, Field, model_validator

from packages.intake_shared.config import (
    IntakeSettings,
    resolve_component_settings,
    resolve_secret,
)
from resources.substrates.redis.component import RESOURCE_COMPONENT_ID


class RedisSettings(BaseModel):
    """Redis connectivity and timeouts for shared window counters.

    An explicit ``url`` wins; otherwise one is assembled from the split
    host/port/db/auth fields.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    url: str | None = "redis://redis:6379/0"
    host: str = "redis"
    port: int = Field(default=6379, gt=0)
    db: int = Field(default=0, ge=0)
    username: str = ""
    password: str = ""
    password_env: str = ""
    ssl: bool = False
    connect_timeout_seconds: float = Field(default=2.0, gt=0)
    socket_timeout_seconds: float = Field(default=2.0, gt=0)
    health_timeout_seconds: float = Field(default=1.0, gt=0)
    max_connections: int = Field(default=20, gt=0)

    @model_validator(mode="after")
    def _resolve_url(self) -> "RedisSettings":
        if self.url is not None and self.url.strip() != "":
            object.__setattr__(self, "url", self.url.strip())
            return self
        password = resolve_secret(
            inline=self.password,
            env_name=self.password_env,
            setting="substrate.redis.password",
        )
        object.__setattr__(self, "password", password)
        object.__setattr__(self, "url", _url_from_parts(self))
        return self


def _url_from_parts(redis: RedisSettings) -> str:
    host = redis.host.strip()
    if host == "":
        raise ValueError("substrate.redis.host is required when url is unset")

    username = quote_plus(redis.username.strip())
    password = quote_plus(redis.password)
    if username and password:
        auth = f"{username}:{password}@"
    elif username:
        auth = f"{username}@"
    elif password:
        auth = f":{password}@"
    else:
        auth = ""

    scheme = "rediss" if redis.ssl else "redis"
    return f"{scheme}://{auth}{host}:{redis.port}/{redis.db}"


def resolve_redis_settings(settings: IntakeSettings) -> RedisSettings:
    """Resolve Redis substrate settings from ``components.substrate.redis``."""
    return resolve_component_settings(
        settings=settings,
        component_id=RESOURCE_COMPONENT_ID,
        model=RedisSettings,
    )
