"""SQL-level tests for the submission repository."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError

from services.state.submission_authority.data.repository import (
    _row_dt,
    duplicate_keys,
)
from services.state.submission_authority.domain import SubmissionRecord
from services.state.submission_authority.ledger import edited_entry, original_entry

_NOW = datetime(2026, 10, 17, 9, 30, tzinfo=UTC)


def _record(**overrides: object) -> SubmissionRecord:
    values: dict[str, object] = {
        "id": str(uuid4()),
        "fields": {"brand-name": "Acme", "email": "A@X.com", "q9-color": ["Pastels"]},
        "history": (original_entry(edited_by="client", timestamp=_NOW),),
        "version": 1,
        "created_at": _NOW,
        "updated_at": _NOW,
        "edit_token": str(uuid4()),
        "edit_token_expires_at": _NOW + timedelta(days=30),
    }
    values.update(overrides)
    return SubmissionRecord(**values)


def test_insert_and_read_back_by_id_and_token(repository) -> None:
    """Inserted records should round-trip fields, history and UTC datetimes."""
    record = _record()
    repository.insert_submission(record=record)

    by_id = repository.get_submission(submission_id=record.id)
    by_token = repository.get_by_edit_token(edit_token=record.edit_token)

    assert by_id == record
    assert by_token is not None and by_token.id == record.id
    assert by_id.created_at.tzinfo == UTC


def test_insert_duplicate_id_raises_integrity_error(repository) -> None:
    """Ids are unique; a second insert with the same id should fail."""
    record = _record()
    repository.insert_submission(record=record)

    with pytest.raises(IntegrityError):
        repository.insert_submission(record=_record(id=record.id, edit_token=None))


def test_update_applies_only_at_expected_version(repository) -> None:
    """A stale version should not write; the current version should."""
    record = _record()
    repository.insert_submission(record=record)
    history = (*record.history, edited_entry(edited_by="admin", timestamp=_NOW))

    stale = repository.update_submission(
        submission_id=record.id,
        expected_version=7,
        fields={"brand-name": "Other"},
        history=history,
        updated_at=_NOW,
    )
    fresh = repository.update_submission(
        submission_id=record.id,
        expected_version=1,
        fields={"brand-name": "Other"},
        history=history,
        updated_at=_NOW,
    )

    assert stale is None
    assert fresh is not None
    assert fresh.version == 2
    assert fresh.fields == {"brand-name": "Other"}
    assert fresh.edit_token == record.edit_token


def test_token_conditioned_update_clears_token_once(repository) -> None:
    """A token-conditioned update should consume the token exactly once."""
    record = _record()
    repository.insert_submission(record=record)
    history = (*record.history, edited_entry(edited_by="client", timestamp=_NOW))

    first = repository.update_submission(
        submission_id=record.id,
        expected_version=1,
        fields=dict(record.fields),
        history=history,
        updated_at=_NOW,
        expected_edit_token=record.edit_token,
    )
    replay = repository.update_submission(
        submission_id=record.id,
        expected_version=2,
        fields=dict(record.fields),
        history=history,
        updated_at=_NOW,
        expected_edit_token=record.edit_token,
    )

    assert first is not None
    assert first.edit_token is None
    assert first.edit_token_expires_at is None
    assert replay is None
    assert repository.get_by_edit_token(edit_token=record.edit_token) is None


def test_find_duplicate_is_case_insensitive(repository) -> None:
    """Duplicate lookup should match lowercase email and brand keys."""
    repository.insert_submission(record=_record())

    assert repository.find_duplicate(email_key="a@x.com", brand_key="acme") is True
    assert repository.find_duplicate(email_key="a@x.com", brand_key="other") is False


def test_list_is_newest_first_and_delete_reports_existence(repository) -> None:
    """Listing should order by creation time descending; delete is idempotent."""
    older = _record(created_at=_NOW - timedelta(days=1), edit_token=None)
    newer = _record(edit_token=None)
    repository.insert_submission(record=older)
    repository.insert_submission(record=newer)

    listed = repository.list_submissions(limit=10)

    assert [item.id for item in listed] == [newer.id, older.id]
    assert repository.delete_submission(submission_id=older.id) is True
    assert repository.delete_submission(submission_id=older.id) is False


def test_duplicate_keys_ignore_non_string_values() -> None:
    """Only string email/brand values should contribute lookup keys."""
    assert duplicate_keys({"email": " Me@Site.IO ", "brand-name": None}) == (
        "me@site.io",
        "",
    )


def test_row_dt_rejects_non_datetime_values() -> None:
    """Datetime extraction must fail fast on malformed row values."""
    with pytest.raises(ValueError, match="expected datetime column for created_at"):
        _row_dt({"created_at": "2026-10-17T00:00:00Z"}, "created_at")
