"""server.py — Serve bundle bodies over HTTP for out-of-process harnesses.

Browser test harnesses that intercept requests in another process (a
Playwright route handler, a dev proxy) can fetch bodies from this router
instead of importing the bundle. It exposes exactly the transport
contract ``(concept, preset?, overrides?) → body``; route matching,
latency and retries stay with the harness.

    GET  /fixtures                          → concepts and their preset names
    GET  /fixtures/{concept}?preset=        → one entity
    POST /fixtures/{concept}?preset=        → one entity, JSON body = overrides
    GET  /fixtures/{concept}/response       → response body
    POST /fixtures/{concept}/response       → response body, JSON body = overrides

Enveloped response factories (``status=...``) answer with that status
code and the inner body.

Called by: the app hosting the harness (``app.include_router(...)``)
Depends on: bundle.py, errors.py
"""

from __future__ import annotations

from typing import Any, NoReturn

import structlog
from fastapi import APIRouter, Body, HTTPException, Query
from fastapi.responses import JSONResponse

from fixturekit.bundle import Bundle
from fixturekit.errors import (
    DefinitionMismatchError,
    FixtureError,
    UnknownConceptError,
    UnknownPresetError,
)

logger = structlog.get_logger()


def _raise_http(exc: FixtureError) -> NoReturn:
    """Map a fixture error onto an HTTP error the harness can report."""
    if isinstance(exc, UnknownConceptError | UnknownPresetError):
        status_code = 404
    elif isinstance(exc, DefinitionMismatchError):
        status_code = 422
    else:
        status_code = 500
    logger.warning("fixture_request_failed", code=exc.code, error=exc.message)
    raise HTTPException(status_code=status_code, detail=exc.to_dict()) from exc


def create_fixture_router(bundle: Bundle, *, prefix: str = "/fixtures") -> APIRouter:
    """Build a router serving ``bundle``."""
    router = APIRouter(prefix=prefix, tags=["fixtures"])

    def _entity(concept: str, preset: str | None, overrides: Any) -> Any:
        try:
            return bundle[concept].create(preset, overrides)
        except FixtureError as exc:
            _raise_http(exc)

    def _response(concept: str, preset: str | None, overrides: Any) -> Any:
        try:
            entry = bundle[concept].Response
            body = entry.create(preset, overrides)
        except FixtureError as exc:
            _raise_http(exc)
        if entry.factory.enveloped:
            return JSONResponse(status_code=body["status"], content=body["body"])
        return body

    @router.get("")
    async def list_concepts() -> dict[str, Any]:
        """List every concept with its object and response preset names."""
        return {
            "concepts": [
                {
                    "name": name,
                    "presets": list(entry.presets.names()),
                    "response": entry.Response.factory.name if entry.has_response else None,
                    "response_presets": (
                        list(entry.Response.presets.names()) if entry.has_response else []
                    ),
                }
                for name, entry in bundle.items()
            ]
        }

    @router.get("/{concept}")
    async def get_entity(concept: str, preset: str | None = Query(default=None)) -> Any:
        return _entity(concept, preset, None)

    @router.post("/{concept}")
    async def post_entity(
        concept: str,
        preset: str | None = Query(default=None),
        overrides: dict[str, Any] | None = Body(default=None),
    ) -> Any:
        return _entity(concept, preset, overrides)

    @router.get("/{concept}/response")
    async def get_response(concept: str, preset: str | None = Query(default=None)) -> Any:
        return _response(concept, preset, None)

    @router.post("/{concept}/response")
    async def post_response(
        concept: str,
        preset: str | None = Query(default=None),
        overrides: dict[str, Any] | list[Any] | None = Body(default=None),
    ) -> Any:
        return _response(concept, preset, overrides)

    return router
