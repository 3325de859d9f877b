"""Collaborator protocols — the only external interfaces the cache core depends on.

Concrete implementations (``chordsmith.services.spotify.SpotifyClient``,
``chordsmith.auth.tokens.resolve_identity``) satisfy these protocols; the cache,
index and orchestrator never import them directly.
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from chordsmith.models.tracks import TrackDetails


@runtime_checkable
class TrackMetadata(Protocol):
    """Port for catalog metadata lookups."""

    async def get_track(self, subject_id: str) -> TrackDetails | None:
        """Resolve a subject id to track details.

        Unknown or invalid ids return ``None``; implementations must not raise.
        """
        ...


class IdentityResolver(Protocol):
    """Port mapping an opaque identity token to an e-mail address."""

    def __call__(self, identity_token: str) -> str | None:
        ...
