"""Catalog track shapes and library display rows."""
from __future__ import annotations

from pydantic import Field

from chordsmith.models.base import CamelModel

PLACEHOLDER_ART_URL = "https://picsum.photos/100"


class TrackDetails(CamelModel):
    """Metadata for one catalog track."""

    uri: str
    name: str
    artists: list[str] = Field(default_factory=list)
    album: str | None = None
    art: str = PLACEHOLDER_ART_URL
    preview_url: str | None = None

    @property
    def artist_line(self) -> str:
        return ", ".join(self.artists)


class SongRow(CamelModel):
    """A song as listed in search results and the library view."""

    uri: str
    name: str
    artist: str
    art: str = PLACEHOLDER_ART_URL
    preview_url: str | None = None
    is_generated: bool = False

    @classmethod
    def from_track(cls, track: TrackDetails, is_generated: bool = False) -> "SongRow":
        return cls(
            uri=track.uri,
            name=track.name,
            artist=track.artist_line,
            art=track.art,
            preview_url=track.preview_url,
            is_generated=is_generated,
        )
