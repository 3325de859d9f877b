"""Pydantic models for the Chordsmith API."""
from __future__ import annotations

from chordsmith.models.charts import (
    AccompanimentText,
    ChartLine,
    ChordChart,
    FretboardDiagram,
    Measure,
)
from chordsmith.models.tracks import SongRow, TrackDetails

__all__ = [
    "AccompanimentText",
    "ChartLine",
    "ChordChart",
    "FretboardDiagram",
    "Measure",
    "SongRow",
    "TrackDetails",
]
