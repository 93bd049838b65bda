"""Authoritative Postgres repository for Submission Authority Service state."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import JsonValue
from sqlalchemy import delete, insert, select, text, update
from sqlalchemy.orm import Session, sessionmaker

from resources.substrates.postgres import transactional_session
from services.state.submission_authority.domain import HistoryEntry, SubmissionRecord
from services.state.submission_authority.interfaces import SubmissionRepository

from .schema import submissions


class PostgresSubmissionRepository(SubmissionRepository):
    """SQL repository over the ``submissions`` table."""

    def __init__(self, *, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def get_submission(self, *, submission_id: str) -> SubmissionRecord | None:
        """Read one submission row by id."""
        with transactional_session(self._session_factory) as session:
            return _one_or_none(session, submissions.c.id == submission_id)

    def get_by_edit_token(self, *, edit_token: str) -> SubmissionRecord | None:
        """Read the submission row holding ``edit_token``."""
        with transactional_session(self._session_factory) as session:
            return _one_or_none(session, submissions.c.edit_token == edit_token)

    def insert_submission(self, *, record: SubmissionRecord) -> SubmissionRecord:
        """Insert one new row; a duplicate id raises an integrity error."""
        email_key, brand_key = duplicate_keys(record.fields)
        with transactional_session(self._session_factory) as session:
            session.execute(
                insert(submissions).values(
                    id=record.id,
                    fields=dict(record.fields),
                    email_key=email_key,
                    brand_key=brand_key,
                    edit_token=record.edit_token,
                    edit_token_expires_at=record.edit_token_expires_at,
                    history=_history_json(record.history),
                    version=record.version,
                    created_at=record.created_at,
                    updated_at=record.updated_at,
                )
            )
        return record

    def update_submission(
        self,
        *,
        submission_id: str,
        expected_version: int,
        fields: dict[str, JsonValue],
        history: tuple[HistoryEntry, ...],
        updated_at: datetime,
        expected_edit_token: str | None = None,
    ) -> SubmissionRecord | None:
        """Apply one version-guarded UPDATE and return the new row, or ``None``."""
        email_key, brand_key = duplicate_keys(fields)
        conditions = [
            submissions.c.id == submission_id,
            submissions.c.version == expected_version,
        ]
        values: dict[str, Any] = {
            "fields": dict(fields),
            "email_key": email_key,
            "brand_key": brand_key,
            "history": _history_json(history),
            "version": expected_version + 1,
            "updated_at": updated_at,
        }
        if expected_edit_token is not None:
            conditions.append(submissions.c.edit_token == expected_edit_token)
            values["edit_token"] = None
            values["edit_token_expires_at"] = None

        with transactional_session(self._session_factory) as session:
            result = session.execute(
                update(submissions).where(*conditions).values(**values)
            )
            if int(result.rowcount or 0) != 1:
                return None
            return _one_or_none(session, submissions.c.id == submission_id)

    def find_duplicate(self, *, email_key: str, brand_key: str) -> bool:
        """Return whether any row matches both lowercase keys."""
        with transactional_session(self._session_factory) as session:
            row = session.execute(
                select(submissions.c.id)
                .where(
                    submissions.c.email_key == email_key,
                    submissions.c.brand_key == brand_key,
                )
                .limit(1)
            ).first()
            return row is not None

    def list_submissions(self, *, limit: int) -> list[SubmissionRecord]:
        """Return up to ``limit`` rows newest first."""
        with transactional_session(self._session_factory) as session:
            rows = (
                session.execute(
                    select(submissions)
                    .order_by(submissions.c.created_at.desc(), submissions.c.id)
                    .limit(limit)
                )
                .mappings()
                .all()
            )
            return [_to_record(row) for row in rows]

    def delete_submission(self, *, submission_id: str) -> bool:
        """Delete one row by id and return whether it existed."""
        with transactional_session(self._session_factory) as session:
            result = session.execute(
                delete(submissions).where(submissions.c.id == submission_id)
            )
            return int(result.rowcount or 0) > 0

    def ping(self) -> bool:
        with transactional_session(self._session_factory) as session:
            session.execute(text("SELECT 1"))
        return True


def duplicate_keys(fields: dict[str, JsonValue]) -> tuple[str, str]:
    """Return lowercase ``(email, brand-name)`` keys for duplicate checks."""
    return _key(fields.get("email"), 254), _key(fields.get("brand-name"), 120)


def _key(value: object, limit: int) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip().lower()[:limit]


def _one_or_none(session: Session, condition: Any) -> SubmissionRecord | None:
    row = (
        session.execute(select(submissions).where(condition)).mappings().one_or_none()
    )
    return None if row is None else _to_record(row)


def _history_json(history: tuple[HistoryEntry, ...]) -> list[dict[str, Any]]:
    return [entry.model_dump(mode="json", exclude_none=True) for entry in history]


def _to_record(row: Any) -> SubmissionRecord:
    """Map one SQL row to a strict domain record."""
    expires_at = row.get("edit_token_expires_at")
    return SubmissionRecord(
        id=str(row["id"]),
        fields=dict(row["fields"] or {}),
        history=tuple(
            HistoryEntry.model_validate(item) for item in (row["history"] or [])
        ),
        version=int(row["version"]),
        created_at=_row_dt(row, "created_at"),
        updated_at=_row_dt(row, "updated_at"),
        edit_token=row.get("edit_token"),
        edit_token_expires_at=(
            None if expires_at is None else _row_dt(row, "edit_token_expires_at")
        ),
    )


def _row_dt(row: Any, column: str) -> datetime:
    """Read and normalize one timezone-aware datetime field from SQL row."""
    value = row.get(column)
    if not isinstance(value, datetime):
        raise ValueError(f"expected datetime column for {column}")
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
