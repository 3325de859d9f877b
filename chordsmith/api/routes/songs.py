"""Catalog search endpoint."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from chordsmith.api.dependencies import get_library
from chordsmith.config import settings
from chordsmith.models.tracks import SongRow
from chordsmith.services.library import LibraryService

router = APIRouter()

limiter = Limiter(key_func=get_remote_address)


@router.get("/songs/search", response_model=list[SongRow], response_model_by_alias=True)
@limiter.limit(settings.lookup_rate_limit)
async def search_songs(
    request: Request,
    q: str = Query(default="", max_length=256),
    arrangement_style: str = Query(default="", alias="arrangementStyle", max_length=64),
    library: LibraryService = Depends(get_library),
) -> list[SongRow]:
    """Search the catalog; ``isGenerated`` marks songs with a cached chart for the style."""
    return await library.search_catalog(q, arrangement_style)
