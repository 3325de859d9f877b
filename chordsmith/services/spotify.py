"""Spotify catalog client.

Implements the ``TrackMetadata`` port over the Spotify Web API using the
client-credentials flow. Lookups never raise: unknown ids, missing
credentials and upstream failures all come back as ``None`` (or ``[]`` for
search) and are logged.
"""
from __future__ import annotations

import asyncio
import httpx
import logging
import time
from typing import Any, Optional

from chordsmith.cache.keys import is_catalog_subject
from chordsmith.config import settings
from chordsmith.models.tracks import PLACEHOLDER_ART_URL, TrackDetails

logger = logging.getLogger(__name__)

# Refresh the access token this many seconds before Spotify says it expires.
_TOKEN_EXPIRY_MARGIN = 60.0

_LOOKUP_ERRORS = (httpx.HTTPError, KeyError, TypeError, ValueError)


class CatalogUnavailable(Exception):
    """Raised internally when no access token can be obtained."""
    pass


def track_id_from_uri(uri: str) -> str | None:
    """``spotify:track:<id>`` -> ``<id>``; None for anything else."""
    if not is_catalog_subject(uri):
        return None
    track_id = uri.split(":")[-1]
    return track_id or None


def track_from_payload(track: dict[str, Any]) -> TrackDetails:
    """Build TrackDetails from a Spotify track object."""
    album = track.get("album") or {}
    images = album.get("images") or []
    return TrackDetails(
        uri=track["uri"],
        name=track["name"],
        artists=[a["name"] for a in track.get("artists", [])],
        album=album.get("name"),
        art=images[0]["url"] if images else PLACEHOLDER_ART_URL,
        preview_url=track.get("preview_url"),
    )


class SpotifyClient:
    """
    Async client for the Spotify Web API.

    The access token is cached until shortly before it expires and dropped on
    any 401, so the next call fetches a fresh one.
    """

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        api_url: Optional[str] = None,
        token_url: Optional[str] = None,
        timeout: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.client_id = client_id or settings.spotify_client_id
        self.client_secret = client_secret or settings.spotify_client_secret
        self.api_url = (api_url or settings.spotify_api_url).rstrip("/")
        self.token_url = token_url or settings.spotify_token_url
        self.timeout = timeout or settings.spotify_timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._access_token: Optional[str] = None
        self._token_expires_at = 0.0
        self._token_lock = asyncio.Lock()

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def get_track(self, subject_id: str) -> TrackDetails | None:
        """Track details for a catalog URI, or None."""
        track_id = track_id_from_uri(subject_id)
        if track_id is None:
            return None
        try:
            data = await self._get(f"/tracks/{track_id}")
            track = track_from_payload(data)
        except CatalogUnavailable as e:
            logger.error(f"[spotify] Catalog unavailable for {subject_id}: {e}")
            return None
        except _LOOKUP_ERRORS as e:
            logger.error(f"[spotify] Error fetching track details for {subject_id}: {e}")
            return None
        logger.debug(f"[spotify] Fetched track details for {subject_id}")
        return track

    async def search_tracks(self, query: str, limit: Optional[int] = None) -> list[TrackDetails]:
        """Catalog search; any failure yields an empty list."""
        if not query:
            return []
        try:
            data = await self._get(
                "/search",
                params={"q": query, "type": "track", "limit": limit or settings.catalog_search_limit},
            )
            items = (data.get("tracks") or {}).get("items") or []
            tracks = [track_from_payload(item) for item in items]
        except CatalogUnavailable as e:
            logger.error(f"[spotify] Catalog unavailable for search {query!r}: {e}")
            return []
        except _LOOKUP_ERRORS as e:
            logger.error(f"[spotify] Error searching tracks for {query!r}: {e}")
            return []
        logger.info(f"[spotify] Found {len(tracks)} tracks for {query!r}")
        return tracks

    async def health_check(self) -> bool:
        """True if an access token can be obtained."""
        try:
            await self._get_access_token()
            return True
        except (CatalogUnavailable, *_LOOKUP_ERRORS):
            return False

    async def _get(self, path: str, params: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        token = await self._get_access_token()
        response = await self.client.get(
            f"{self.api_url}{path}",
            params=params,
            headers={"Authorization": f"Bearer {token}"},
        )
        if response.status_code == 401:
            self._access_token = None
        response.raise_for_status()
        return response.json()

    async def _get_access_token(self) -> str:
        if self._access_token and time.monotonic() < self._token_expires_at:
            return self._access_token
        if not self.configured:
            raise CatalogUnavailable("Spotify API credentials are not set")

        async with self._token_lock:
            if self._access_token and time.monotonic() < self._token_expires_at:
                return self._access_token
            response = await self.client.post(
                self.token_url,
                data={"grant_type": "client_credentials"},
                auth=(self.client_id or "", self.client_secret or ""),
            )
            if response.is_error:
                raise CatalogUnavailable(f"Token request failed with HTTP {response.status_code}")
            data = response.json()
            self._access_token = data["access_token"]
            expires_in = float(data.get("expires_in", 3600))
            self._token_expires_at = time.monotonic() + max(expires_in - _TOKEN_EXPIRY_MARGIN, 0.0)
            logger.info("[spotify] Obtained client-credentials access token")
            return self._access_token
