"""Generation cache: key derivation, namespaced storage and the library index."""
from __future__ import annotations

from chordsmith.cache.index import RecencyIndex, RecentEntry
from chordsmith.cache.kinds import ArtifactKind
from chordsmith.cache.store import CacheEntry, GenerationCache

__all__ = [
    "ArtifactKind",
    "CacheEntry",
    "GenerationCache",
    "RecencyIndex",
    "RecentEntry",
]
