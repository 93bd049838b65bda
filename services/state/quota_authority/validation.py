"""Request validation models for Quota Authority Service public API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CheckQuotaRequest(BaseModel):
    """Validate one quota-check request payload.

    Blank caller ids are allowed and collapse to ``unknown`` in the limiter.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    caller_id: str | None = None
    endpoint: str = Field(min_length=1)

    @field_validator("endpoint", mode="before")
    @classmethod
    def _strip_endpoint(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip()
        return value
