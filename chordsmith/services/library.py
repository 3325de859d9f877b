"""
Library service: turns index results into display rows.

``RecencyIndex`` only knows subject ids. This module resolves each one through
the catalog concurrently and drops the rows that cannot be resolved, so one
missing track never empties the whole list.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

from chordsmith.cache.index import RecencyIndex
from chordsmith.cache.keys import derive_chord_chart_key, normalize_variant
from chordsmith.cache.kinds import ArtifactKind
from chordsmith.cache.store import GenerationCache
from chordsmith.config import settings
from chordsmith.errors import CacheReadError, MetadataResolutionFailed
from chordsmith.models.tracks import SongRow, TrackDetails
from chordsmith.ports import TrackMetadata
from chordsmith.services.spotify import SpotifyClient

logger = logging.getLogger(__name__)


class LibraryService:
    """Recent, library search and catalog search listings."""

    def __init__(
        self,
        index: RecencyIndex,
        cache: GenerationCache,
        track_metadata: TrackMetadata,
        catalog: Optional[SpotifyClient] = None,
    ):
        self.index = index
        self.cache = cache
        self.track_metadata = track_metadata
        self.catalog = catalog

    async def recent_songs(self, variant_label: str | None = None, max_count: int | None = None) -> list[SongRow]:
        """Most recently generated songs for an arrangement style, newest first."""
        count = max_count or settings.recent_default_count
        variant = normalize_variant(variant_label)
        try:
            entries = await self.index.recent(count, variant)
        except CacheReadError as e:
            logger.error(f"[library] Could not list recent songs: {e}")
            return []
        return await self.hydrate([entry.subject_id for entry in entries])

    async def search_library(self, query: str) -> list[SongRow]:
        """Generated songs whose title or an artist matches ``query`` exactly (case-insensitive)."""
        if not query:
            return []
        try:
            subject_ids = await self.index.search(query)
        except CacheReadError as e:
            logger.error(f"[library] Library search failed for {query!r}: {e}")
            return []
        return await self.hydrate(subject_ids)

    async def search_catalog(self, query: str, variant_label: str | None = None) -> list[SongRow]:
        """Catalog search, each row flagged with whether a chart already exists for the style."""
        if not query or self.catalog is None:
            return []
        tracks = await self.catalog.search_tracks(query)
        flags = await asyncio.gather(
            *(
                self.cache.exists(
                    ArtifactKind.CHORD_CHART,
                    derive_chord_chart_key(track.uri, variant_label or ""),
                )
                for track in tracks
            )
        )
        return [SongRow.from_track(track, is_generated=flag) for track, flag in zip(tracks, flags)]

    async def hydrate(self, subject_ids: list[str]) -> list[SongRow]:
        """Resolve subjects to rows, preserving order and skipping failures."""
        results = await asyncio.gather(
            *(self._resolve(subject_id) for subject_id in subject_ids),
            return_exceptions=True,
        )
        rows: list[SongRow] = []
        for subject_id, result in zip(subject_ids, results):
            if isinstance(result, MetadataResolutionFailed):
                logger.warning(f"[library] Skipping row: {result}")
                continue
            if isinstance(result, BaseException):
                logger.error(f"[library] Error hydrating {subject_id}: {result}")
                continue
            rows.append(SongRow.from_track(result, is_generated=True))
        return rows

    async def _resolve(self, subject_id: str) -> TrackDetails:
        track = await self.track_metadata.get_track(subject_id)
        if track is None:
            raise MetadataResolutionFailed(subject_id)
        return track
