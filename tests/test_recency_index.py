"""Tests for RecencyIndex (chordsmith/cache/index.py)."""
from __future__ import annotations

from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from chordsmith.cache.index import RecencyIndex, RecentEntry
from chordsmith.cache.kinds import ArtifactKind
from chordsmith.cache.store import GenerationCache
from chordsmith.errors import CacheReadError

from tests.fakes import SAMPLE_FRETBOARD, make_chart

A = "spotify:track:abc"
B = "spotify:track:def"
C = "spotify:track:ghi"


async def _store_chart(cache: GenerationCache, subject_id: str, variant: str = "") -> None:
    key = subject_id if not variant else f"{subject_id}-{variant}"
    await cache.put(
        ArtifactKind.CHORD_CHART, key, make_chart("C"),
        subject_id=subject_id, variant_label=variant or "Standard",
    )


# ---------------------------------------------------------------------------
# recent
# ---------------------------------------------------------------------------


class TestRecent:

    @pytest.mark.asyncio
    async def test_empty_store(self, index: RecencyIndex) -> None:
        assert await index.recent(10) == []

    @pytest.mark.asyncio
    async def test_newest_first(self, cache: GenerationCache, index: RecencyIndex) -> None:
        for subject in (A, B, C):
            await _store_chart(cache, subject)
        entries = await index.recent(10)
        assert [e.subject_id for e in entries] == [C, B, A]

    @pytest.mark.asyncio
    async def test_subject_represented_by_newest_chart_only(self, cache: GenerationCache, index: RecencyIndex) -> None:
        """A/Standard, then B/Standard, then A/Pop: A's newest chart is Pop, so Standard lists only B."""
        await _store_chart(cache, A)
        await _store_chart(cache, B)
        await _store_chart(cache, A, "Pop Arrangement")

        assert await index.recent(10, "Standard") == [RecentEntry(B, "Standard")]
        assert await index.recent(10, "Pop Arrangement") == [RecentEntry(A, "Pop Arrangement")]
        assert [e.subject_id for e in await index.recent(10)] == [A, B]

    @pytest.mark.asyncio
    async def test_truncates_after_filtering(self, cache: GenerationCache, index: RecencyIndex) -> None:
        # scan_window is 2, so the two Standard charts sit on a later page
        # than the two Pop charts; the listing must page past them.
        await _store_chart(cache, A)
        await _store_chart(cache, B)
        await _store_chart(cache, C, "Pop Arrangement")
        await _store_chart(cache, "spotify:track:jkl", "Pop Arrangement")

        entries = await index.recent(2, "Standard")
        assert [e.subject_id for e in entries] == [B, A]

    @pytest.mark.asyncio
    async def test_max_count_bounds_result(self, cache: GenerationCache, index: RecencyIndex) -> None:
        for subject in (A, B, C):
            await _store_chart(cache, subject)
        assert len(await index.recent(2)) == 2
        assert await index.recent(0) == []

    @pytest.mark.asyncio
    async def test_ignores_other_kinds(self, cache: GenerationCache, index: RecencyIndex) -> None:
        await cache.put(ArtifactKind.FRETBOARD_DIAGRAM, "C", SAMPLE_FRETBOARD)
        await _store_chart(cache, A)
        assert [e.subject_id for e in await index.recent(10)] == [A]

    @pytest.mark.asyncio
    async def test_overwrite_moves_subject_to_front(self, cache: GenerationCache, index: RecencyIndex) -> None:
        await _store_chart(cache, A)
        await _store_chart(cache, B)
        await _store_chart(cache, A)
        assert [e.subject_id for e in await index.recent(10)] == [A, B]

    @pytest.mark.asyncio
    async def test_store_failure_raises_read_error(self, index: RecencyIndex, database) -> None:
        def broken(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("gone"))

        with patch.object(database, "session", side_effect=broken):
            with pytest.raises(CacheReadError):
                await index.recent(10)


# ---------------------------------------------------------------------------
# search
# ---------------------------------------------------------------------------


class TestSearch:

    @pytest.mark.asyncio
    async def test_exact_token_case_insensitive(self, cache: GenerationCache, index: RecencyIndex) -> None:
        await _store_chart(cache, B)  # Let It Be / The Beatles
        assert await index.search("The Beatles") == [B]
        assert await index.search("THE BEATLES") == [B]
        assert await index.search("let it be") == [B]

    @pytest.mark.asyncio
    async def test_substring_does_not_match(self, cache: GenerationCache, index: RecencyIndex) -> None:
        await _store_chart(cache, B)
        assert await index.search("beatles") == []
        assert await index.search("let") == []

    @pytest.mark.asyncio
    async def test_newest_first_and_deduplicated(self, cache: GenerationCache, index: RecencyIndex) -> None:
        await _store_chart(cache, B)
        await _store_chart(cache, C)
        await _store_chart(cache, B, "Pop Arrangement")
        assert await index.search("the beatles") == [B, C]

    @pytest.mark.asyncio
    async def test_empty_query(self, index: RecencyIndex) -> None:
        assert await index.search("") == []
