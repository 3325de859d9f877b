"""Request and response bodies for the Chordsmith API."""
from __future__ import annotations

from pydantic import Field, field_validator

from chordsmith.models.base import CamelModel
from chordsmith.models.charts import ChordChart

_MAX_URI_LENGTH = 512
_MAX_STYLE_LENGTH = 64


class ChordsRequest(CamelModel):
    """Request a chord chart for a song, optionally forcing regeneration."""

    song_uri: str = Field(
        ...,
        min_length=1,
        max_length=_MAX_URI_LENGTH,
        description="Catalog URI of the song, or local:file:<name> for an upload",
        examples=["spotify:track:7iN1s7xHE4ifF5povM6A48"],
    )
    arrangement_style: str = Field(
        default="",
        max_length=_MAX_STYLE_LENGTH,
        description="Arrangement style; empty means Standard",
        examples=["Pop Arrangement"],
    )
    force_new: bool = Field(
        default=False,
        description="Bypass and overwrite the cached chart (admin only)",
    )

    @field_validator("song_uri")
    @classmethod
    def no_null_bytes(cls, v: str) -> str:
        if "\x00" in v:
            raise ValueError("Song URI must not contain null bytes")
        return v


class DeleteChordsRequest(CamelModel):
    """Remove a cached chord chart (admin only)."""

    song_uri: str = Field(..., min_length=1, max_length=_MAX_URI_LENGTH)
    arrangement_style: str = Field(default="", max_length=_MAX_STYLE_LENGTH)


class AccompanimentTextRequest(CamelModel):
    """Request playing suggestions for a chart."""

    song_name: str = Field(..., min_length=1, max_length=256)
    artist_name: str = Field(..., min_length=1, max_length=256)
    chords: ChordChart
    arrangement_style: str = Field(default="", max_length=_MAX_STYLE_LENGTH)


class SuccessResponse(CamelModel):
    success: bool = True


class VideoResponse(CamelModel):
    video_id: str


class SessionResponse(CamelModel):
    """Identity behind the caller's bearer token."""

    is_logged: bool
    email: str | None = None
    is_admin: bool = False
