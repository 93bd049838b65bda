"""Unit tests for Redis substrate settings resolution and validation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from packages.intake_shared.config import IntakeSettings
from resources.substrates.redis.config import RedisSettings, resolve_redis_settings


def test_redis_settings_rejects_ambiguous_password_sources() -> None:
    """Password cannot be supplied inline and via env reference together."""
    with pytest.raises(ValidationError, match="mutually exclusive"):
        RedisSettings(url=None, password="one", password_env="REDIS_PASSWORD")


def test_redis_settings_resolves_password_from_env(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Password should resolve from referenced environment variable."""
    monkeypatch.setenv("REDIS_PASSWORD", "secret")

    settings = RedisSettings(url=None, password_env="REDIS_PASSWORD")

    assert settings.password == "secret"
    assert settings.url == "redis://:secret@redis:6379/0"


def test_redis_settings_builds_tls_url_from_split_fields() -> None:
    """Settings should build a URL when explicit URL is not provided."""
    settings = RedisSettings(
        url="",
        host="localhost",
        port=6380,
        db=4,
        username="intake",
        password="pw",
        ssl=True,
    )

    assert settings.url == "rediss://intake:pw@localhost:6380/4"


def test_redis_settings_rejects_missing_password_env_when_url_unset(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Split-field mode should fail when referenced password env var is unset."""
    monkeypatch.delenv("REDIS_PASSWORD", raising=False)
    with pytest.raises(ValidationError, match="references missing env var"):
        RedisSettings(url=None, password_env="REDIS_PASSWORD")


def test_resolve_redis_settings_reads_component_namespace() -> None:
    """Settings should resolve from ``components.substrate.redis``."""
    settings = IntakeSettings(
        components={"substrate": {"redis": {"url": "redis://cache:6379/2"}}}
    )
    assert resolve_redis_settings(settings).url == "redis://cache:6379/2"
