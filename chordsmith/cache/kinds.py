"""Artifact kinds and their payload models."""
from __future__ import annotations

from enum import Enum

from chordsmith.models.base import CamelModel
from chordsmith.models.charts import AccompanimentText, ChordChart, FretboardDiagram


class ArtifactKind(str, Enum):
    """Kinds of generated artifact. Each kind is its own cache namespace."""
    CHORD_CHART = "chord_chart"
    FRETBOARD_DIAGRAM = "fretboard_diagram"
    ACCOMPANIMENT_TEXT = "accompaniment_text"

    @property
    def namespace(self) -> str:
        return self.value

    @property
    def payload_model(self) -> type[CamelModel]:
        return PAYLOAD_MODELS[self]


PAYLOAD_MODELS: dict[ArtifactKind, type[CamelModel]] = {
    ArtifactKind.CHORD_CHART: ChordChart,
    ArtifactKind.FRETBOARD_DIAGRAM: FretboardDiagram,
    ArtifactKind.ACCOMPANIMENT_TEXT: AccompanimentText,
}
