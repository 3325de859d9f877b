"""Accompaniment text endpoint."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from chordsmith.api.dependencies import get_orchestrator, raise_http_error
from chordsmith.config import settings
from chordsmith.errors import ChordsmithError
from chordsmith.models.charts import AccompanimentText
from chordsmith.models.requests import AccompanimentTextRequest
from chordsmith.services.backends.base import AccompanimentRequest
from chordsmith.services.orchestrator import GenerationOrchestrator

router = APIRouter()

limiter = Limiter(key_func=get_remote_address)


@router.post("/accompaniment-text", response_model=AccompanimentText, response_model_by_alias=True)
@limiter.limit(settings.generation_rate_limit)
async def get_accompaniment_text(
    request: Request,
    body: AccompanimentTextRequest,
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
) -> AccompanimentText:
    """
    Strumming pattern and playing-style suggestions for a chart.

    Cached by the chart's chord set and style, so songs that share a
    progression share the suggestions.
    """
    generation_request = AccompanimentRequest(
        song_name=body.song_name,
        artist_name=body.artist_name,
        chart=body.chords,
        variant_label=body.arrangement_style,
    )
    try:
        text = await orchestrator.get_or_generate(generation_request)
    except ChordsmithError as e:
        raise_http_error(e)
    if not isinstance(text, AccompanimentText):
        raise TypeError(f"Expected AccompanimentText, got {type(text).__name__}")
    return text
