"""Aggregate readiness across the intake services."""

from __future__ import annotations

from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError

from pydantic import BaseModel, ConfigDict, Field

from packages.intake_shared.envelope import EnvelopeKind, new_meta


class ComponentHealthResult(BaseModel):
    """One component-level readiness result."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    ready: bool
    detail: str = ""


class IntakeHealthResult(BaseModel):
    """Aggregate readiness keyed by component id."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    ready: bool
    components: dict[str, ComponentHealthResult] = Field(default_factory=dict)


def evaluate_intake_health(
    *,
    components: Mapping[str, object],
    max_timeout_seconds: float,
) -> IntakeHealthResult:
    """Evaluate every component's ``health(meta=...)`` under one timeout each."""
    results = {
        component_id: _evaluate_component_health(
            component=component,
            max_timeout_seconds=max_timeout_seconds,
        )
        for component_id, component in components.items()
    }
    return IntakeHealthResult(
        ready=all(item.ready for item in results.values()),
        components=results,
    )


def _evaluate_component_health(
    *,
    component: object,
    max_timeout_seconds: float,
) -> ComponentHealthResult:
    health_fn = getattr(component, "health", None)
    if not callable(health_fn):
        return ComponentHealthResult(
            ready=False, detail="component does not expose health()"
        )
    meta = new_meta(
        kind=EnvelopeKind.RESULT, source="intake_health", principal="system"
    )

    # shutdown(wait=False): a hung check is abandoned, not joined.
    executor = ThreadPoolExecutor(max_workers=1)
    try:
        future = executor.submit(health_fn, meta=meta)
        try:
            result = future.result(timeout=max_timeout_seconds)
        except FutureTimeoutError:
            return ComponentHealthResult(
                ready=False,
                detail=f"health() exceeded max timeout ({max_timeout_seconds:.3f}s)",
            )
        except Exception as exc:  # noqa: BLE001
            return ComponentHealthResult(
                ready=False, detail=f"health() raised {type(exc).__name__}"
            )
    finally:
        executor.shutdown(wait=False)

    return _coerce_health_result(result)


def _coerce_health_result(result: object) -> ComponentHealthResult:
    """Reduce a health envelope to ready/detail using its ``*_ready`` fields."""
    errors = getattr(result, "errors", None)
    if not isinstance(errors, list):
        return ComponentHealthResult(
            ready=False, detail="health() returned unsupported result"
        )
    if len(errors) > 0:
        return ComponentHealthResult(ready=False, detail=errors[0].message)

    payload = getattr(result, "value", None)
    if payload is None or not hasattr(payload, "model_dump"):
        return ComponentHealthResult(ready=True, detail="ok")
    values = payload.model_dump(mode="python")
    ready_fields = [
        value
        for key, value in values.items()
        if key.endswith("_ready") and isinstance(value, bool)
    ]
    detail = values.get("detail")
    return ComponentHealthResult(
        ready=all(ready_fields),
        detail=detail if isinstance(detail, str) and detail else "ok",
    )
