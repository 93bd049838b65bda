"""Behavior tests for Submission Authority Service implementation."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from uuid import uuid4

from packages.intake_shared.envelope import EnvelopeKind, new_meta
from packages.intake_shared.errors import ErrorCategory, codes
from services.state.submission_authority.config import SubmissionAuthoritySettings
from services.state.submission_authority.data.repository import (
    PostgresSubmissionRepository,
)
from services.state.submission_authority.implementation import (
    DefaultSubmissionAuthorityService,
)
from services.state.submission_authority.ledger import edited_entry

_NOW = datetime(2026, 10, 17, 12, 0, tzinfo=UTC)


class _RacingRepository:
    """Repository wrapper that loses the first ``races`` conditional updates."""

    def __init__(self, inner: PostgresSubmissionRepository, *, races: int) -> None:
        self._inner = inner
        self.races = races
        self.update_calls = 0

    def __getattr__(self, name: str):
        return getattr(self._inner, name)

    def update_submission(self, **kwargs):
        self.update_calls += 1
        if self.races > 0:
            self.races -= 1
            current = self._inner.get_submission(submission_id=kwargs["submission_id"])
            self._inner.update_submission(
                submission_id=current.id,
                expected_version=current.version,
                fields={**current.fields, "q6-positioning": "concurrent"},
                history=(
                    *current.history,
                    edited_entry(edited_by="admin", timestamp=_NOW),
                ),
                updated_at=_NOW,
            )
        return self._inner.update_submission(**kwargs)


class _BrokenRepository:
    def __getattr__(self, name: str):
        def _raise(**kwargs):
            raise RuntimeError("connection reset")

        return _raise


def _service(repository, **settings: object) -> DefaultSubmissionAuthorityService:
    return DefaultSubmissionAuthorityService(
        settings=SubmissionAuthoritySettings(**settings),
        repository=repository,
        clock=lambda: _NOW,
    )


def _meta() -> object:
    return new_meta(kind=EnvelopeKind.COMMAND, source="test", principal="operator")


def _create(service: DefaultSubmissionAuthorityService):
    result = service.create_submission(
        meta=_meta(),
        fields={"brand-name": "Acme", "email": "a@x.com"},
        created_by="client",
    )
    assert result.ok
    return result.value


def test_create_issues_thirty_day_token_and_original_entry(repository) -> None:
    """A client create should hold a UUID edit token and one original entry."""
    record = _create(_service(repository))

    assert record.version == 1
    assert record.edit_token is not None
    assert record.edit_token_expires_at == _NOW + timedelta(days=30)
    assert [(item.label, item.edited_by) for item in record.history] == [
        ("original", "client")
    ]


def test_token_revision_appends_entry_and_replay_is_not_found(repository) -> None:
    """Token edits are single-use: the replay should be a not-found failure."""
    service = _service(repository)
    record = _create(service)
    entry = edited_entry(edited_by="client", timestamp=_NOW)

    first = service.revise_submission(
        meta=_meta(),
        submission_id=record.id,
        fields={"email": "new@x.com"},
        entry=entry,
        edit_token=record.edit_token,
    )
    replay = service.revise_submission(
        meta=_meta(),
        submission_id=record.id,
        fields={"email": "again@x.com"},
        entry=entry,
        edit_token=record.edit_token,
    )

    assert first.ok
    assert first.value.fields == {"brand-name": "Acme", "email": "new@x.com"}
    assert len(first.value.history) == 2
    assert first.value.history[1].edited_by == "client"
    assert first.value.edit_token is None
    assert replay.has_category(ErrorCategory.NOT_FOUND)


def test_lost_race_is_retried_and_keeps_both_entries(repository) -> None:
    """A concurrent write should be merged, not overwritten, on retry."""
    racing = _RacingRepository(repository, races=1)
    service = _service(racing)
    record = _create(service)

    result = service.revise_submission(
        meta=_meta(),
        submission_id=record.id,
        fields={"status": "approved"},
        entry=edited_entry(edited_by="admin", timestamp=_NOW, note="approve"),
    )

    assert result.ok
    assert racing.update_calls == 2
    assert result.value.fields["q6-positioning"] == "concurrent"
    assert result.value.fields["status"] == "approved"
    assert [item.label for item in result.value.history] == [
        "original",
        "edited",
        "edited",
    ]
    assert result.value.version == 3


def test_exhausted_retries_return_retryable_conflict(repository) -> None:
    """Losing every attempt should yield a retryable concurrent-modification error."""
    racing = _RacingRepository(repository, races=5)
    service = _service(racing, max_write_attempts=2)
    record = _create(service)

    result = service.revise_submission(
        meta=_meta(),
        submission_id=record.id,
        fields={"status": "approved"},
        entry=edited_entry(edited_by="admin", timestamp=_NOW),
    )

    assert result.ok is False
    assert result.errors[0].code == codes.CONCURRENT_MODIFICATION
    assert result.errors[0].retryable is True


def test_revise_missing_submission_is_not_found(repository) -> None:
    """Revising an unknown id should report not found."""
    result = _service(repository).revise_submission(
        meta=_meta(),
        submission_id=str(uuid4()),
        fields={},
        entry=edited_entry(edited_by="admin", timestamp=_NOW),
    )

    assert result.has_category(ErrorCategory.NOT_FOUND)


def test_create_with_existing_id_is_conflict(repository) -> None:
    """Explicit ids that already exist should map to an already-exists conflict."""
    service = _service(repository)
    record = _create(service)

    result = service.create_submission(
        meta=_meta(),
        fields={},
        created_by="admin",
        submission_id=record.id,
        issue_edit_token=False,
    )

    assert result.has_category(ErrorCategory.CONFLICT)
    assert result.errors[0].code == codes.ALREADY_EXISTS


def test_invalid_ids_are_validation_errors(repository) -> None:
    """Non-UUID ids and tokens should be rejected before touching storage."""
    service = _service(repository)

    by_id = service.get_submission(meta=_meta(), submission_id="not-a-uuid")
    by_token = service.get_submission_by_edit_token(meta=_meta(), edit_token="abc")

    assert by_id.errors[0].message.startswith("submission_id:")
    assert by_token.has_category(ErrorCategory.VALIDATION)


def test_store_exceptions_map_to_errors_not_raises() -> None:
    """Repository failures should become envelope errors."""
    service = _service(_BrokenRepository())

    created = service.create_submission(meta=_meta(), fields={}, created_by="client")
    health = service.health(meta=_meta())

    assert created.ok is False
    assert created.errors[0].category == ErrorCategory.INTERNAL
    assert health.value.store_ready is False


def test_find_duplicate_and_delete(repository) -> None:
    """Duplicate checks ignore case; delete reports whether the row existed."""
    service = _service(repository)
    record = _create(service)

    dup = service.find_duplicate(meta=_meta(), email="A@X.COM", brand_name=" acme ")
    deleted = service.delete_submission(meta=_meta(), submission_id=record.id)
    again = service.delete_submission(meta=_meta(), submission_id=record.id)

    assert dup.value is True
    assert deleted.value is True
    assert again.value is False
    assert service.list_submissions(meta=_meta()).value == []
