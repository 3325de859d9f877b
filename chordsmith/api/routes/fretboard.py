"""Fretboard diagram endpoint."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from chordsmith.api.dependencies import get_orchestrator, raise_http_error
from chordsmith.config import settings
from chordsmith.errors import ChordsmithError
from chordsmith.models.charts import FretboardDiagram
from chordsmith.services.backends.base import FretboardRequest
from chordsmith.services.orchestrator import GenerationOrchestrator

router = APIRouter()

limiter = Limiter(key_func=get_remote_address)


@router.get("/fretboard", response_model=FretboardDiagram, response_model_by_alias=True)
@limiter.limit(settings.generation_rate_limit)
async def get_fretboard(
    request: Request,
    chord: str = Query(..., min_length=1, max_length=32, description='Chord name, e.g. "C/G"'),
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
) -> FretboardDiagram:
    """Fingering for a chord. Diagrams are shared across every song."""
    try:
        diagram = await orchestrator.get_or_generate(FretboardRequest(chord=chord))
    except ChordsmithError as e:
        raise_http_error(e)
    if not isinstance(diagram, FretboardDiagram):
        raise TypeError(f"Expected FretboardDiagram, got {type(diagram).__name__}")
    return diagram
