"""SQLAlchemy table definitions owned by Quota Authority Service."""

from __future__ import annotations

from sqlalchemy import BigInteger, Column, Index, Integer, MetaData, String, Table

metadata = MetaData()

rate_limits = Table(
    "rate_limits",
    metadata,
    Column("caller_id", String(64), primary_key=True),
    Column("endpoint", String(64), primary_key=True),
    Column("window_start", BigInteger, primary_key=True, autoincrement=False),
    Column("count", Integer, nullable=False, server_default="1"),
    Index("ix_rate_limits_window_start", "window_start"),
)
