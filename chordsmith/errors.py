"""Error taxonomy for the generation cache and orchestrator.

Only ``CacheDeleteError``, ``GenerationFailed`` and ``Unauthorized`` ever reach
a caller. Read and write failures are logged and absorbed by the cache layer;
``MetadataResolutionFailed`` drops a single row during library hydration.
"""
from __future__ import annotations


class ChordsmithError(Exception):
    """Base class for Chordsmith errors."""
    pass


class CacheReadError(ChordsmithError):
    """The store was unavailable or returned a malformed entry on read."""
    pass


class CacheWriteError(ChordsmithError):
    """The store was unavailable on write."""
    pass


class CacheDeleteError(ChordsmithError):
    """The store was unavailable on delete."""
    pass


class GenerationFailed(ChordsmithError):
    """The generator errored or returned an empty/unusable payload."""
    pass


class Unauthorized(ChordsmithError):
    """The acting identity may not force-regenerate or delete."""
    pass


class MetadataResolutionFailed(ChordsmithError):
    """Track metadata could not be resolved for a subject."""

    def __init__(self, subject_id: str, reason: str = "not found"):
        self.subject_id = subject_id
        super().__init__(f"Could not resolve metadata for {subject_id}: {reason}")
