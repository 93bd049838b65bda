"""Tests for startup ordering in the intake process entrypoint."""

from __future__ import annotations

import pytest

from packages.intake_core import main as main_module
from packages.intake_shared.config import IntakeSettings


def _patch_startup(
    monkeypatch: pytest.MonkeyPatch, settings: IntakeSettings
) -> list[str]:
    calls: list[str] = []
    monkeypatch.setattr(main_module, "load_settings", lambda: settings)
    monkeypatch.setattr(
        main_module,
        "configure_from_settings",
        lambda _settings: calls.append("logging"),
    )
    monkeypatch.setattr(
        main_module,
        "run_startup_migrations",
        lambda *, settings: calls.append("migrations"),
    )
    monkeypatch.setattr(
        main_module,
        "build_services",
        lambda _settings: calls.append("services") or object(),
    )
    monkeypatch.setattr(
        main_module,
        "create_intake_app",
        lambda *, settings, services: calls.append("app") or object(),
    )

    def _run_app(app, *, host, port, log_level):
        calls.append(f"serve {host}:{port} {log_level}")

    monkeypatch.setattr(main_module, "run_app", _run_app)
    return calls


def test_main_migrates_before_building_services_and_serving(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Startup configures logging, migrates, builds services, then serves."""
    settings = IntakeSettings(server={"host": "0.0.0.0", "port": 9000})
    calls = _patch_startup(monkeypatch, settings)

    main_module.main()

    assert calls == [
        "logging",
        "migrations",
        "services",
        "app",
        "serve 0.0.0.0:9000 INFO",
    ]


def test_main_skips_migrations_when_disabled(monkeypatch: pytest.MonkeyPatch) -> None:
    settings = IntakeSettings(server={"run_migrations_on_startup": False})
    calls = _patch_startup(monkeypatch, settings)

    main_module.main()

    assert "migrations" not in calls
    assert calls[0] == "logging"


def test_captcha_verifier_follows_profile_secret() -> None:
    """A blank profile secret leaves the bot check off; a set one turns it on."""
    from packages.intake_core.runtime import build_captcha_verifier

    disabled = build_captcha_verifier(IntakeSettings())
    enabled = build_captcha_verifier(
        IntakeSettings(
            profile={"captcha_secret": "turnstile-secret", "captcha_local_bypass": True},
            components={"adapter": {"captcha": {"timeout_seconds": 3}}},
        )
    )

    assert disabled.enabled is False
    assert enabled.enabled is True
    assert enabled.local_bypass_allowed is True
    disabled.close()
    enabled.close()
