"""FastAPI dependencies for the components built at start-up, and error mapping."""
from __future__ import annotations

import logging
from typing import Any, NoReturn

from fastapi import HTTPException, Request

from chordsmith.errors import CacheDeleteError, CacheReadError, ChordsmithError, GenerationFailed, Unauthorized
from chordsmith.services.library import LibraryService
from chordsmith.services.orchestrator import GenerationOrchestrator
from chordsmith.services.youtube import YouTubeClient

logger = logging.getLogger(__name__)


def _from_state(request: Request, name: str) -> Any:
    component = getattr(request.app.state, name, None)
    if component is None:
        raise HTTPException(status_code=503, detail={"error": f"{name} is not available"})
    return component


def get_orchestrator(request: Request) -> GenerationOrchestrator:
    return _from_state(request, "orchestrator")


def get_library(request: Request) -> LibraryService:
    return _from_state(request, "library")


def get_youtube(request: Request) -> YouTubeClient:
    return _from_state(request, "youtube")


def raise_http_error(e: ChordsmithError) -> NoReturn:
    """Translate a domain error into the matching HTTPException."""
    if isinstance(e, Unauthorized):
        raise HTTPException(status_code=403, detail={"error": str(e)}) from e
    if isinstance(e, GenerationFailed):
        raise HTTPException(status_code=502, detail={"error": "Generation failed", "message": str(e)}) from e
    if isinstance(e, (CacheDeleteError, CacheReadError)):
        raise HTTPException(status_code=503, detail={"error": "Cache unavailable", "message": str(e)}) from e
    logger.error(f"Unhandled domain error: {e}")
    raise HTTPException(status_code=500, detail={"error": "Internal error"}) from e
