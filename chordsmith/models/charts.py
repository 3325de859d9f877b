"""Generated artifact payloads.

These are the shapes produced by the generators, stored in the generation
cache, and returned to clients. Field names are snake_case in Python and in
stored payloads, camelCase on the wire.
"""
from __future__ import annotations

from pydantic import Field, field_validator

from chordsmith.models.base import CamelModel

STRING_COUNT = 6


class Measure(CamelModel):
    """One measure of a chart line."""

    chords: str = Field(
        default="",
        description='Chords for this measure separated by spaces, e.g. "C" or "G Am".',
    )
    start_time: float = Field(default=0.0, description="Offset in seconds from the start of the song")


class ChartLine(CamelModel):
    """A lyric line with its measures."""

    lyrics: str = ""
    start_time: float = Field(default=0.0, description="Offset in seconds from the start of the song")
    measures: list[Measure] = Field(default_factory=list)


class ChordChart(CamelModel):
    """Chords, lyrics and timing for a whole song."""

    lines: list[ChartLine] = Field(default_factory=list)
    unique_chords: list[str] = Field(
        default_factory=list,
        description="Unique chord names in order of first appearance",
    )

    def progression_text(self) -> str:
        """Render the chart as one ``|``-separated row of measures per line."""
        return "\n".join(
            " | ".join(m.chords for m in line.measures)
            for line in self.lines
        )

    def has_chords(self) -> bool:
        if self.unique_chords:
            return True
        return any(m.chords.strip() for line in self.lines for m in line.measures)


class FretboardDiagram(CamelModel):
    """Fingering for one chord, low E string first (E A D G B e)."""

    frets: list[int] = Field(
        ...,
        min_length=STRING_COUNT,
        max_length=STRING_COUNT,
        description="-1 muted, 0 open, >0 fret number",
    )
    fingers: list[int] = Field(
        ...,
        min_length=STRING_COUNT,
        max_length=STRING_COUNT,
        description="0 open/unfretted, 1-4 index to pinky",
    )

    @field_validator("frets")
    @classmethod
    def frets_in_range(cls, v: list[int]) -> list[int]:
        if any(f < -1 for f in v):
            raise ValueError("Fret numbers must be -1 (muted) or greater")
        return v

    @field_validator("fingers")
    @classmethod
    def fingers_in_range(cls, v: list[int]) -> list[int]:
        if any(f < 0 or f > 4 for f in v):
            raise ValueError("Finger assignments must be between 0 and 4")
        return v


class AccompanimentText(CamelModel):
    """Playing-style suggestions for a chart."""

    playing_style_suggestion: str = Field(..., min_length=1)
    strumming_pattern: str = Field(..., min_length=1, description="e.g. 'D DU UDU'")
    advanced_techniques: str | None = None
