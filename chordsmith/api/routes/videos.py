"""Video lookup endpoint."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from chordsmith.api.dependencies import get_youtube
from chordsmith.config import settings
from chordsmith.models.requests import VideoResponse
from chordsmith.services.youtube import YouTubeClient, video_query

router = APIRouter()

limiter = Limiter(key_func=get_remote_address)


@router.get("/videos/search", response_model=VideoResponse, response_model_by_alias=True)
@limiter.limit(settings.lookup_rate_limit)
async def search_video(
    request: Request,
    song_name: str = Query(..., alias="songName", min_length=1, max_length=256),
    artist_name: str = Query(..., alias="artistName", min_length=1, max_length=256),
    youtube: YouTubeClient = Depends(get_youtube),
) -> VideoResponse:
    video_id = await youtube.search_video(video_query(song_name, artist_name))
    if video_id is None:
        raise HTTPException(status_code=404, detail={"error": "No video found"})
    return VideoResponse(video_id=video_id)
