"""YouTube video lookup for the player panel."""
from __future__ import annotations

import httpx
import logging
from typing import Optional

from chordsmith.config import settings

logger = logging.getLogger(__name__)


def video_query(song_name: str, artist_name: str) -> str:
    return f"{song_name} {artist_name} official audio"


class YouTubeClient:
    """Finds the first matching video id via the YouTube Data API v3 search endpoint."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key or settings.youtube_api_key
        self.api_url = (api_url or settings.youtube_api_url).rstrip("/")
        self.timeout = timeout or settings.youtube_timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def search_video(self, query: str) -> str | None:
        """Video id of the top search hit, or None if nothing matched or the lookup failed."""
        if not self.api_key:
            logger.error("[youtube] API key is not configured")
            return None
        try:
            response = await self.client.get(
                f"{self.api_url}/search",
                params={
                    "part": "snippet",
                    "q": query,
                    "type": "video",
                    "maxResults": 1,
                    "key": self.api_key,
                },
            )
            response.raise_for_status()
            items = response.json().get("items") or []
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"[youtube] Error searching video for {query!r}: {e}")
            return None

        if not items:
            logger.info(f"[youtube] No video found for {query!r}")
            return None
        video_id = (items[0].get("id") or {}).get("videoId")
        logger.info(f"[youtube] Found videoId {video_id} for {query!r}")
        return video_id or None
