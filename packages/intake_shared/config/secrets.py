"""Secret resolution for settings that accept inline or env-referenced values."""

from __future__ import annotations

import os


def resolve_secret(*, inline: str, env_name: str, setting: str) -> str:
    """Return ``inline`` or the value of env var ``env_name``.

    Supplying both is ambiguous and rejected; referencing an unset variable
    is a configuration error rather than a silent empty secret.
    """
    value = inline.strip()
    env_name = env_name.strip()
    if value != "" and env_name != "":
        raise ValueError(f"{setting} and {setting}_env are mutually exclusive")
    if value != "" or env_name == "":
        return value
    resolved = os.environ.get(env_name, "").strip()
    if resolved == "":
        raise ValueError(f"{setting}_env references missing env var '{env_name}'")
    return resolved
