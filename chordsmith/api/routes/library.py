"""
Library endpoints: songs that already have a generated chart.

- GET /library/recent  newest generated songs for an arrangement style
- GET /library/search  exact title or artist match, case-insensitive
"""
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


@router.get("/library/recent", response_model=list[SongRow], response_model_by_alias=True)
@limiter.limit(settings.lookup_rate_limit)
async def recent_songs(
    request: Request,
    arrangement_style: str = Query(default="", alias="arrangementStyle", max_length=64),
    limit: int = Query(default=settings.recent_default_count, ge=1, le=50),
    library: LibraryService = Depends(get_library),
) -> list[SongRow]:
    return await library.recent_songs(arrangement_style, limit)


@router.get("/library/search", response_model=list[SongRow], response_model_by_alias=True)
@limiter.limit(settings.lookup_rate_limit)
async def search_library(
    request: Request,
    q: str = Query(default="", max_length=256),
    library: LibraryService = Depends(get_library),
) -> list[SongRow]:
    return await library.search_library(q)
