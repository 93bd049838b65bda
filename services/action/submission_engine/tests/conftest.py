"""Shared fixtures for Submission Engine tests."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from packages.intake_shared.continuation import ContinuationSigner
from resources.adapters.captcha import CaptchaVerifier
from resources.substrates.postgres import create_session_factory
from services.action.submission_engine.config import (
    SubmissionEngineProfile,
    SubmissionEngineSettings,
)
from services.action.submission_engine.implementation import (
    DefaultSubmissionEngineService,
)
from services.state.submission_authority.config import SubmissionAuthoritySettings
from services.state.submission_authority.data.repository import (
    PostgresSubmissionRepository,
)
from services.state.submission_authority.data.schema import metadata
from services.state.submission_authority.implementation import (
    DefaultSubmissionAuthorityService,
)

SECRET = "continuation-test-secret"
SITE_URL = "https://form.example.test"


@dataclass
class FakeClock:
    """Mutable UTC clock shared by the engine, authority and signer."""

    now: datetime = datetime(2026, 10, 17, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def epoch_seconds(self) -> float:
        return self.now.timestamp()


@dataclass
class EngineHarness:
    engine: DefaultSubmissionEngineService
    authority: DefaultSubmissionAuthorityService
    signer: ContinuationSigner
    clock: FakeClock


@pytest.fixture
def build_harness():
    """Return a factory building an engine over an in-memory SQLite store."""
    engines = []

    def _build(
        *,
        secret: str = SECRET,
        captcha: CaptchaVerifier | None = None,
        **engine_settings: object,
    ) -> EngineHarness:
        sql_engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        metadata.create_all(sql_engine)
        engines.append(sql_engine)

        clock = FakeClock()
        authority = DefaultSubmissionAuthorityService(
            settings=SubmissionAuthoritySettings(),
            repository=PostgresSubmissionRepository(
                session_factory=create_session_factory(sql_engine)
            ),
            clock=clock,
        )
        signer = ContinuationSigner(secret=secret, clock=clock.epoch_seconds)
        engine = DefaultSubmissionEngineService(
            settings=SubmissionEngineSettings(**engine_settings),
            profile=SubmissionEngineProfile(site_url=SITE_URL, continuation_secret=secret),
            submission_service=authority,
            signer=signer,
            clock=clock,
            captcha=captcha,
        )
        return EngineHarness(engine=engine, authority=authority, signer=signer, clock=clock)

    yield _build
    for sql_engine in engines:
        sql_engine.dispose()
