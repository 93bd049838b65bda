"""Shared fixtures for Submission Authority tests."""

from __future__ import annotations

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from resources.substrates.postgres import create_session_factory
from services.state.submission_authority.data.repository import (
    PostgresSubmissionRepository,
)
from services.state.submission_authority.data.schema import metadata


@pytest.fixture
def repository():
    """Repository over an in-memory SQLite database with the real table."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    metadata.create_all(engine)
    yield PostgresSubmissionRepository(session_factory=create_session_factory(engine))
    engine.dispose()
