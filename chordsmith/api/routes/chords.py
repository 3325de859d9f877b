"""
Chord chart endpoints.

- POST   /chords  get-or-generate a chart (``forceNew`` requires an admin token)
- DELETE /chords  remove a cached chart (admin only)
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from chordsmith.api.dependencies import get_orchestrator, raise_http_error
from chordsmith.auth.dependencies import optional_bearer_token, require_bearer_token
from chordsmith.config import settings
from chordsmith.errors import ChordsmithError
from chordsmith.models.charts import ChordChart
from chordsmith.models.requests import ChordsRequest, DeleteChordsRequest, SuccessResponse
from chordsmith.services.backends.base import ChordChartRequest
from chordsmith.services.orchestrator import GenerationOrchestrator

router = APIRouter()
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)


@router.post("/chords", response_model=ChordChart, response_model_by_alias=True)
@limiter.limit(settings.generation_rate_limit)
async def get_chords(
    request: Request,
    chords_request: ChordsRequest,
    token: str | None = Depends(optional_bearer_token),
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
) -> ChordChart:
    """Return the chart for a song, generating and caching it on first request."""
    generation_request = ChordChartRequest(
        subject_id=chords_request.song_uri,
        variant_label=chords_request.arrangement_style,
    )
    try:
        chart = await orchestrator.get_or_generate(
            generation_request,
            force=chords_request.force_new,
            identity_token=token,
        )
    except ChordsmithError as e:
        raise_http_error(e)
    if not isinstance(chart, ChordChart):
        raise TypeError(f"Expected ChordChart, got {type(chart).__name__}")
    return chart


@router.delete("/chords", response_model=SuccessResponse, response_model_by_alias=True)
async def delete_chords(
    delete_request: DeleteChordsRequest,
    token: str = Depends(require_bearer_token),
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
) -> SuccessResponse:
    """Remove a cached chart. Deleting a chart that was never generated succeeds."""
    generation_request = ChordChartRequest(
        subject_id=delete_request.song_uri,
        variant_label=delete_request.arrangement_style,
    )
    try:
        await orchestrator.delete(generation_request, identity_token=token)
    except ChordsmithError as e:
        raise_http_error(e)
    logger.info(f"Deleted chart for {delete_request.song_uri} ({delete_request.arrangement_style or 'Standard'})")
    return SuccessResponse()
