"""SQLAlchemy table definitions owned by Submission Authority Service."""

from __future__ import annotations

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB

metadata = MetaData()

_JSON = JSON().with_variant(JSONB(), "postgresql")

submissions = Table(
    "submissions",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("fields", _JSON, nullable=False),
    Column("email_key", String(254), nullable=False, server_default=""),
    Column("brand_key", String(120), nullable=False, server_default=""),
    Column("edit_token", String(36), nullable=True),
    Column("edit_token_expires_at", DateTime(timezone=True), nullable=True),
    Column("history", _JSON, nullable=False),
    Column("version", Integer, nullable=False, server_default="1"),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    UniqueConstraint("edit_token", name="uq_submissions_edit_token"),
    Index("ix_submissions_duplicate_keys", "email_key", "brand_key"),
    Index("ix_submissions_created_at", "created_at"),
)
