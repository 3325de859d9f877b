"""
Generation orchestrator.

Single entry point for every artifact request: consults the generation cache,
calls the generator for the request's kind on a miss, post-processes chord
charts and writes the result back. Forced regeneration and deletion are
admin-only and checked before any cache access.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping

from chordsmith.auth.admin import AdminGate
from chordsmith.cache.keys import (
    derive_accompaniment_key,
    derive_chord_chart_key,
    derive_fretboard_key,
    is_catalog_subject,
    normalize_variant,
    sanitize,
)
from chordsmith.cache.kinds import ArtifactKind
from chordsmith.cache.store import GenerationCache
from chordsmith.core.chord_utils import normalize_chart
from chordsmith.errors import GenerationFailed, Unauthorized
from chordsmith.models.base import CamelModel
from chordsmith.models.charts import ChordChart
from chordsmith.services.backends.base import (
    AccompanimentRequest,
    ArtifactGenerator,
    ChordChartRequest,
    FretboardRequest,
    GenerationRequest,
)

logger = logging.getLogger(__name__)


def derive_key(request: GenerationRequest) -> str:
    """Cache key for a request."""
    if isinstance(request, ChordChartRequest):
        return derive_chord_chart_key(request.subject_id, request.variant_label)
    if isinstance(request, FretboardRequest):
        return derive_fretboard_key(request.chord)
    if isinstance(request, AccompanimentRequest):
        # Keyed by the chords in the measures, not the list the caller sent
        return derive_accompaniment_key(normalize_chart(request.chart).unique_chords, request.variant_label)
    raise TypeError(f"Unsupported request type: {type(request).__name__}")


def should_persist(request: GenerationRequest) -> bool:
    """Charts for local uploads are never stored."""
    if isinstance(request, ChordChartRequest):
        return is_catalog_subject(request.subject_id)
    return True


class GenerationOrchestrator:
    """Get-or-generate over the cache, plus admin-only delete."""

    def __init__(
        self,
        cache: GenerationCache,
        generators: Mapping[ArtifactKind, ArtifactGenerator],
        admin_gate: AdminGate,
    ):
        self.cache = cache
        self.generators = dict(generators)
        self.admin_gate = admin_gate
        self._in_flight: dict[tuple[ArtifactKind, str], asyncio.Future[CamelModel]] = {}

    async def get_or_generate(
        self,
        request: GenerationRequest,
        force: bool = False,
        identity_token: str | None = None,
    ) -> CamelModel:
        """
        Return the cached artifact for ``request``, generating it on a miss.

        Args:
            request: What to produce
            force: Skip the cache read and overwrite the stored entry (admin only)
            identity_token: Caller's access token; consulted only when forcing

        Raises:
            Unauthorized: ``force`` was set by a non-admin caller
            GenerationFailed: The generator failed or returned nothing usable
        """
        kind = request.kind
        key = derive_key(request)

        if force:
            if not self.admin_gate.is_authorized(identity_token):
                logger.warning(f"Forced regeneration of {kind.value}/{key} refused")
                raise Unauthorized("Only admins can force regeneration")
            logger.info(f"Forced regeneration of {kind.value}/{key}")
            return await self._generate_and_store(request, key)

        entry = await self.cache.get(kind, key)
        if entry is not None:
            return entry.payload

        # Concurrent misses for the same key share one generation task;
        # cancelling a caller leaves the task running for the others
        flight_key = (kind, sanitize(key))
        task = self._in_flight.get(flight_key)
        if task is None:
            task = asyncio.ensure_future(self._generate_and_store(request, key))
            self._in_flight[flight_key] = task
            task.add_done_callback(lambda done: self._forget(flight_key, done))
        else:
            logger.debug(f"Joining in-flight generation of {kind.value}/{key}")
        return await asyncio.shield(task)

    async def delete(self, request: GenerationRequest, identity_token: str | None) -> None:
        """
        Remove the cached artifact for ``request``.

        Raises:
            Unauthorized: The caller is not an admin; nothing is deleted
            CacheDeleteError: The store could not complete the delete
        """
        kind = request.kind
        key = derive_key(request)
        if not self.admin_gate.is_authorized(identity_token):
            logger.warning(f"Delete of {kind.value}/{key} refused")
            raise Unauthorized("Only admins can delete cached entries")
        await self.cache.delete(kind, key)

    def _forget(self, flight_key: tuple[ArtifactKind, str], task: asyncio.Future[CamelModel]) -> None:
        if self._in_flight.get(flight_key) is task:
            del self._in_flight[flight_key]
        # Retrieve the outcome so a failure nobody is left awaiting is not reported as unhandled
        if not task.cancelled():
            task.exception()

    async def _generate_and_store(self, request: GenerationRequest, key: str) -> CamelModel:
        kind = request.kind
        generator = self.generators.get(kind)
        if generator is None:
            raise GenerationFailed(f"No generator configured for {kind.value}")

        payload = await generator.generate(request)
        if payload is None:
            raise GenerationFailed(f"Generator returned nothing for {kind.value}/{key}")
        if isinstance(payload, ChordChart):
            payload = normalize_chart(payload)

        if not should_persist(request):
            logger.info(f"Not caching {kind.value}/{key} (local upload)")
            return payload

        subject_id: str | None = None
        variant_label: str | None = None
        if isinstance(request, ChordChartRequest):
            subject_id = request.subject_id
            variant_label = normalize_variant(request.variant_label)
        elif isinstance(request, AccompanimentRequest):
            variant_label = normalize_variant(request.variant_label)

        await self.cache.put(kind, key, payload, subject_id=subject_id, variant_label=variant_label)
        return payload
