"""API route modules."""
from __future__ import annotations

from chordsmith.api.routes import accompaniment, chords, fretboard, health, library, session, songs, videos

__all__ = ["accompaniment", "chords", "fretboard", "health", "library", "session", "songs", "videos"]
