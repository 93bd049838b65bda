"""Normalization and validation of submission fields against the form catalog.

Every helper here is pure: it either returns cleaned values or raises
``FieldValidationError`` carrying the client-facing message for the first
violation found.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Mapping
from urllib.parse import urlsplit

from pydantic import JsonValue

from packages.intake_shared.form_catalog import (
    CONTROL_FIELDS,
    DEFAULT_LANGUAGE,
    FIELD_SPECS,
    HONEYPOT_FIELD,
    SUPPORTED_LANGUAGES,
    FieldKind,
    FieldSpec,
)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
SAFE_PATH_RE = re.compile(r"^[a-zA-Z0-9._/()-]+$")
UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)

# Path keys inside one structured inspiration reference.
_REF_PATH_KEYS = ("smallRef", "originalRef")


class FieldValidationError(ValueError):
    """Raised for the first field that fails catalog validation."""

    def __init__(self, message: str, *, field: str) -> None:
        super().__init__(message)
        self.field = field


def is_uuid(value: object) -> bool:
    """Return whether ``value`` is a hyphenated UUID string."""
    return isinstance(value, str) and UUID_RE.fullmatch(value.strip()) is not None


def is_safe_path(value: str) -> bool:
    """Return whether ``value`` is a storage key without traversal."""
    return SAFE_PATH_RE.fullmatch(value) is not None and ".." not in value


def honeypot_triggered(body: Mapping[str, object]) -> bool:
    """Return whether the hidden ``website`` trap field was filled in."""
    value = body.get(HONEYPOT_FIELD)
    if value is None:
        return False
    return str(value).strip() != ""


def resolve_language(body: Mapping[str, object]) -> str:
    """Pick ``lang`` or ``__lang`` when supported, else the default."""
    for key in ("lang", "__lang"):
        value = body.get(key)
        if isinstance(value, str) and value.strip() in SUPPORTED_LANGUAGES:
            return value.strip()
    return DEFAULT_LANGUAGE


def strip_control_fields(body: Mapping[str, JsonValue]) -> dict[str, JsonValue]:
    """Return ``body`` without control keys and the honeypot field."""
    return {
        key: value
        for key, value in body.items()
        if key not in CONTROL_FIELDS and key != HONEYPOT_FIELD
    }


def clean_fields(
    payload: Mapping[str, JsonValue],
    *,
    allowed: Iterable[str],
) -> dict[str, JsonValue]:
    """Normalize and validate every ``allowed`` field present in ``payload``.

    Keys outside ``allowed`` are dropped. Validation stops at the first
    violation.
    """
    cleaned: dict[str, JsonValue] = {}
    for name in allowed:
        if name not in payload:
            continue
        spec = FIELD_SPECS[name]
        cleaned[name] = validate_value(spec, normalize_value(spec, payload[name]))
    return cleaned


def normalize_value(spec: FieldSpec, value: JsonValue) -> JsonValue:
    """Coerce ``value`` to the stored shape for ``spec``.

    Array fields accept a scalar or a list and become a list of non-empty
    items or ``None``. Scalar fields turn ``None`` and ``""`` into ``None``.
    """
    if spec.is_array:
        if value is None or value == "":
            return None
        items = value if isinstance(value, list) else [value]
        cleaned = [_normalize_item(spec, item) for item in items if item]
        return cleaned or None

    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value
    raise FieldValidationError(f'Invalid value for field "{spec.name}".', field=spec.name)


def validate_value(spec: FieldSpec, value: JsonValue) -> JsonValue:
    """Apply length, format and enum rules to one normalized value."""
    if value is None:
        return None
    if spec.is_array:
        assert isinstance(value, list)
        _validate_items(spec, value)
        return value

    assert isinstance(value, str)
    if spec.max_length is not None and len(value) > spec.max_length:
        raise FieldValidationError(
            f'Field "{spec.name}" exceeds maximum length of '
            f"{spec.max_length} characters.",
            field=spec.name,
        )
    if spec.kind is FieldKind.EMAIL:
        stripped = value.strip()
        if stripped and EMAIL_RE.fullmatch(stripped) is None:
            raise FieldValidationError("Invalid email address format.", field=spec.name)
    elif spec.kind is FieldKind.URL:
        _validate_website(spec, value.strip())
    elif spec.kind is FieldKind.STORAGE_REF:
        if not is_safe_path(value):
            raise FieldValidationError("Invalid logo path.", field=spec.name)
    elif spec.kind is FieldKind.CHOICE:
        if value not in spec.choices:
            raise FieldValidationError(
                f'Invalid value for field "{spec.name}".', field=spec.name
            )
    return value


def _normalize_item(spec: FieldSpec, item: JsonValue) -> JsonValue:
    if spec.kind is FieldKind.STORAGE_REFS and isinstance(item, dict):
        return {
            key: str(item[key]) for key in _REF_PATH_KEYS if item.get(key) not in (None, "")
        }
    if isinstance(item, (list, dict)):
        raise FieldValidationError(
            f'Invalid value for field "{spec.name}".', field=spec.name
        )
    return str(item)


def _validate_items(spec: FieldSpec, items: list[JsonValue]) -> None:
    if spec.kind is FieldKind.STORAGE_REFS:
        if len(items) > spec.max_items:
            raise FieldValidationError(
                f"Too many inspiration images (max {spec.max_items}).", field=spec.name
            )
        for item in items:
            _validate_storage_ref(spec, item)
        return

    if len(items) > spec.max_items:
        raise FieldValidationError(
            f'Too many values for field "{spec.name}" (max {spec.max_items}).',
            field=spec.name,
        )
    for item in items:
        if item not in spec.choices:
            raise FieldValidationError(
                f'Invalid value "{item}" for field "{spec.name}".', field=spec.name
            )


def _validate_storage_ref(spec: FieldSpec, item: JsonValue) -> None:
    """Check one inspiration reference: a path or ``{smallRef, originalRef}``."""
    if isinstance(item, str):
        if spec.max_length is not None and len(item) > spec.max_length:
            raise FieldValidationError(
                f'Field "{spec.name}" exceeds maximum length of '
                f"{spec.max_length} characters.",
                field=spec.name,
            )
        parsed = _parse_json_object(item)
        paths = (
            [item]
            if parsed is None
            else [str(parsed[key]) for key in _REF_PATH_KEYS if parsed.get(key)]
        )
    elif isinstance(item, dict):
        paths = [str(value) for value in item.values()]
    else:
        paths = [str(item)]

    for path in paths:
        if not is_safe_path(path):
            raise FieldValidationError("Invalid inspiration image path.", field=spec.name)


def _parse_json_object(value: str) -> dict[str, object] | None:
    if not value.startswith("{"):
        return None
    try:
        parsed = json.loads(value)
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None


def _validate_website(spec: FieldSpec, value: str) -> None:
    if value == "":
        return
    try:
        parts = urlsplit(value)
    except ValueError:
        raise FieldValidationError(
            "Invalid website URL format.", field=spec.name
        ) from None
    if parts.scheme == "" or parts.netloc == "":
        raise FieldValidationError("Invalid website URL format.", field=spec.name)
    if parts.scheme.lower() not in ("http", "https"):
        raise FieldValidationError("Website must use http or https.", field=spec.name)
