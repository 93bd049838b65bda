"""FastAPI and uvicorn helpers for raw request handling."""

from __future__ import annotations

import json
from typing import Any

import uvicorn
from fastapi import FastAPI, Request

from .errors import InvalidJsonBodyError, PayloadTooLargeError


def create_app(*, title: str = "intake", version: str = "0.1.0") -> FastAPI:
    """Create a FastAPI app with project defaults (no interactive docs)."""
    return FastAPI(title=title, version=version, docs_url=None, redoc_url=None)


def run_app(
    app: FastAPI,
    *,
    host: str = "127.0.0.1",
    port: int = 8000,
    log_level: str = "info",
) -> None:
    """Run one FastAPI app through uvicorn without uvicorn's own log config."""
    uvicorn.run(app, host=host, port=port, log_level=log_level.lower(), log_config=None)


def get_header(request: Request, *names: str) -> str:
    """Return the first non-blank stripped value among ``names``, else ``""``."""
    for name in names:
        value = (request.headers.get(name) or "").strip()
        if value:
            return value
    return ""


async def read_json_body(request: Request, *, max_bytes: int | None = None) -> Any:
    """Read and decode one request body as JSON, enforcing an optional size cap."""
    declared = request.headers.get("content-length", "").strip()
    if max_bytes is not None and declared.isdigit() and int(declared) > max_bytes:
        raise PayloadTooLargeError(message="Payload too large.", limit_bytes=max_bytes)

    body = await request.body()
    if max_bytes is not None and len(body) > max_bytes:
        raise PayloadTooLargeError(message="Payload too large.", limit_bytes=max_bytes)
    try:
        return json.loads(body)
    except (ValueError, RecursionError) as exc:
        # ValueError covers decode errors, bad UTF-8 and oversized int literals.
        raise InvalidJsonBodyError(message="Body is not valid JSON") from exc
