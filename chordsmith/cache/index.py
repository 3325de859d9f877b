"""Recency index — library read paths over cached chord charts.

Both operations return bare identifiers. Turning them into display rows is the
job of ``chordsmith.services.library``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import select

from chordsmith.cache.keys import normalize_variant
from chordsmith.cache.kinds import ArtifactKind
from chordsmith.cache.store import STORE_ERRORS
from chordsmith.config import settings
from chordsmith.db.database import Database
from chordsmith.db.models import CacheEntryRow, SearchTokenRow
from chordsmith.errors import CacheReadError

logger = logging.getLogger(__name__)

_NAMESPACE = ArtifactKind.CHORD_CHART.namespace


@dataclass(frozen=True)
class RecentEntry:
    subject_id: str
    variant_label: str


class RecencyIndex:
    """Recent-first listing and exact-token search of generated charts."""

    def __init__(self, database: Database, scan_window: int | None = None):
        self._database = database
        self._scan_window = scan_window or settings.recent_scan_window

    async def recent(self, max_count: int, variant_filter: str | None = None) -> list[RecentEntry]:
        """
        Most recently generated charts, newest first.

        Each subject appears at most once, represented by its newest chart;
        when that chart's variant differs from ``variant_filter`` the subject
        is left out rather than falling back to an older chart. ``max_count``
        bounds the filtered result: the store is paged through until enough
        rows are found or it runs out.

        Raises:
            CacheReadError: If the store is unavailable.
        """
        if max_count <= 0:
            return []

        seen: set[str] = set()
        results: list[RecentEntry] = []
        offset = 0
        while len(results) < max_count:
            page = await self._fetch_page(offset, self._scan_window)
            for subject_id, variant_label in page:
                if subject_id is None or subject_id in seen:
                    continue
                seen.add(subject_id)
                variant = normalize_variant(variant_label)
                if variant_filter is not None and variant != variant_filter:
                    continue
                results.append(RecentEntry(subject_id=subject_id, variant_label=variant))
                if len(results) >= max_count:
                    break
            if len(page) < self._scan_window:
                break
            offset += self._scan_window

        logger.debug(f"[index] recent({max_count}, {variant_filter!r}) -> {len(results)} rows")
        return results

    async def search(self, query_token: str) -> list[str]:
        """
        Subject ids whose search tokens contain ``query_token`` (lower-cased), newest first.

        Matching is exact set membership: "beatles" does not match "the beatles".

        Raises:
            CacheReadError: If the store is unavailable.
        """
        if not query_token:
            return []
        token = query_token.lower()
        stmt = (
            select(CacheEntryRow.subject_id)
            .join(CacheEntryRow.search_tokens)
            .where(
                CacheEntryRow.namespace == _NAMESPACE,
                SearchTokenRow.token == token,
            )
            .order_by(CacheEntryRow.created_at.desc(), CacheEntryRow.storage_id)
        )
        try:
            async with self._database.session() as session:
                result = await session.execute(stmt)
                subject_ids = list(result.scalars().all())
        except STORE_ERRORS as e:
            raise CacheReadError(f"Library search failed: {e}") from e

        seen: set[str] = set()
        unique: list[str] = []
        for subject_id in subject_ids:
            if subject_id and subject_id not in seen:
                seen.add(subject_id)
                unique.append(subject_id)
        logger.debug(f"[index] search({token!r}) -> {len(unique)} subjects")
        return unique

    async def _fetch_page(self, offset: int, limit: int) -> list[tuple[str | None, str | None]]:
        stmt = (
            select(CacheEntryRow.subject_id, CacheEntryRow.variant_label)
            .where(CacheEntryRow.namespace == _NAMESPACE)
            .order_by(CacheEntryRow.created_at.desc(), CacheEntryRow.storage_id)
            .offset(offset)
            .limit(limit)
        )
        try:
            async with self._database.session() as session:
                result = await session.execute(stmt)
                return [(row.subject_id, row.variant_label) for row in result]
        except STORE_ERRORS as e:
            raise CacheReadError(f"Recent listing failed: {e}") from e
