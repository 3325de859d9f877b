"""Generation cache — namespaced key-value storage for generated artifacts.

This module is the ONLY place that reads or writes the ``generation_cache``
tables on behalf of the request path. Callers hand it derived (unsanitized)
keys and typed payloads; it sanitizes keys, serializes payloads, and records
provenance for chord charts.

Failure policy:
  - get / exists: storage or decoding errors are logged and read as a miss.
  - put: storage errors are logged and reported as ``False``; never raised.
  - delete: storage errors raise ``CacheDeleteError``.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from chordsmith.cache.keys import extract_search_tokens, sanitize
from chordsmith.cache.kinds import ArtifactKind
from chordsmith.db.database import Database
from chordsmith.db.models import CacheEntryRow, SearchTokenRow, utc_now
from chordsmith.errors import CacheDeleteError, CacheReadError, CacheWriteError
from chordsmith.models.base import CamelModel
from chordsmith.ports import TrackMetadata

logger = logging.getLogger(__name__)

# Errors that mean "the store is unavailable" rather than a programming bug.
# Driver connection failures surface as OSError before SQLAlchemy wraps them.
STORE_ERRORS = (SQLAlchemyError, OSError)


@dataclass(frozen=True)
class CacheEntry:
    """A cached artifact as seen by callers.

    ``created_at`` is deliberately absent: it is bookkeeping for the recent
    list and never leaves the store.
    """
    payload: CamelModel
    subject_id: str | None = None
    variant_label: str | None = None
    search_tokens: frozenset[str] = field(default_factory=frozenset)


class GenerationCache:
    """Namespaced get/put/exists/delete over the cache tables."""

    def __init__(
        self,
        database: Database,
        track_metadata: TrackMetadata | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._database = database
        self._track_metadata = track_metadata
        self._clock = clock

    async def get(self, kind: ArtifactKind, key: str) -> CacheEntry | None:
        """Return the entry stored under ``key``, or ``None`` on a miss or any read failure."""
        storage_id = sanitize(key)
        try:
            entry = await self._read(kind, storage_id)
        except CacheReadError as e:
            logger.error(f"[cache] Read failed for {kind.namespace}/{storage_id}, treating as miss: {e}")
            return None

        if entry is None:
            logger.info(f"[cache] Miss for {kind.namespace}/{storage_id}")
        else:
            logger.info(f"[cache] Hit for {kind.namespace}/{storage_id}")
        return entry

    async def put(
        self,
        kind: ArtifactKind,
        key: str,
        payload: CamelModel,
        *,
        subject_id: str | None = None,
        variant_label: str | None = None,
    ) -> bool:
        """Store ``payload`` under ``key``, replacing any existing entry.

        Returns False if the write failed; the failure is logged, not raised.
        """
        storage_id = sanitize(key)
        tokens: set[str] = set()
        if kind is ArtifactKind.CHORD_CHART and subject_id:
            tokens = await self._resolve_search_tokens(subject_id)

        try:
            await self._write(kind, storage_id, payload, subject_id, variant_label, tokens)
        except CacheWriteError as e:
            logger.error(f"[cache] Write failed for {kind.namespace}/{storage_id}: {e}")
            return False

        logger.info(f"[cache] Stored {kind.namespace}/{storage_id} ({len(tokens)} search tokens)")
        return True

    async def exists(self, kind: ArtifactKind, key: str) -> bool:
        """True iff an entry is stored under ``key``. Read failures count as absent."""
        storage_id = sanitize(key)
        stmt = (
            select(CacheEntryRow.storage_id)
            .where(
                CacheEntryRow.namespace == kind.namespace,
                CacheEntryRow.storage_id == storage_id,
            )
            .limit(1)
        )
        try:
            async with self._database.session() as session:
                result = await session.execute(stmt)
                return result.scalar_one_or_none() is not None
        except STORE_ERRORS as e:
            logger.error(f"[cache] Existence check failed for {kind.namespace}/{storage_id}: {e}")
            return False

    async def delete(self, kind: ArtifactKind, key: str) -> None:
        """Remove the entry stored under ``key``. Deleting an absent key is not an error.

        Raises:
            CacheDeleteError: If the store could not complete the delete.
        """
        storage_id = sanitize(key)
        try:
            async with self._database.session() as session:
                await session.execute(
                    delete(SearchTokenRow).where(
                        SearchTokenRow.namespace == kind.namespace,
                        SearchTokenRow.storage_id == storage_id,
                    )
                )
                result = await session.execute(
                    delete(CacheEntryRow).where(
                        CacheEntryRow.namespace == kind.namespace,
                        CacheEntryRow.storage_id == storage_id,
                    )
                )
                await session.commit()
        except STORE_ERRORS as e:
            raise CacheDeleteError(f"Could not delete {kind.namespace}/{storage_id}: {e}") from e

        if result.rowcount:
            logger.info(f"[cache] Deleted {kind.namespace}/{storage_id}")
        else:
            logger.info(f"[cache] Delete of absent key {kind.namespace}/{storage_id}")

    async def _read(self, kind: ArtifactKind, storage_id: str) -> CacheEntry | None:
        try:
            async with self._database.session() as session:
                row = await session.get(CacheEntryRow, (kind.namespace, storage_id))
                if row is None:
                    return None
                raw_payload = row.payload
                subject_id = row.subject_id
                variant_label = row.variant_label
                tokens = frozenset(row.token_set)
        except STORE_ERRORS as e:
            raise CacheReadError(str(e)) from e

        try:
            payload = kind.payload_model.model_validate(raw_payload)
        except ValidationError as e:
            raise CacheReadError(f"Malformed payload: {e.error_count()} validation errors") from e

        return CacheEntry(
            payload=payload,
            subject_id=subject_id,
            variant_label=variant_label,
            search_tokens=tokens,
        )

    async def _write(
        self,
        kind: ArtifactKind,
        storage_id: str,
        payload: CamelModel,
        subject_id: str | None,
        variant_label: str | None,
        tokens: set[str],
    ) -> None:
        data = payload.model_dump(mode="json")
        try:
            async with self._database.session() as session:
                row = await session.get(CacheEntryRow, (kind.namespace, storage_id))
                if row is None:
                    row = CacheEntryRow(namespace=kind.namespace, storage_id=storage_id)
                    session.add(row)
                # Whole-entry overwrite: payload, provenance and tokens all replaced.
                row.payload = data
                row.subject_id = subject_id
                row.variant_label = variant_label
                row.created_at = self._clock()
                row.search_tokens = [SearchTokenRow(token=t) for t in sorted(tokens)]
                await session.commit()
        except STORE_ERRORS as e:
            raise CacheWriteError(str(e)) from e

    async def _resolve_search_tokens(self, subject_id: str) -> set[str]:
        """Search tokens for a chart, or an empty set if metadata is unavailable."""
        if self._track_metadata is None:
            return set()
        try:
            track = await self._track_metadata.get_track(subject_id)
        except Exception as e:
            logger.warning(f"[cache] Metadata lookup failed for {subject_id}, storing without search tokens: {e}")
            return set()
        if track is None:
            logger.warning(f"[cache] No metadata for {subject_id}, storing without search tokens")
            return set()
        return extract_search_tokens(track.name, track.artists)
