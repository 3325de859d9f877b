"""Base classes for artifact generators."""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar, Union

from chordsmith.cache.kinds import ArtifactKind
from chordsmith.models.base import CamelModel
from chordsmith.models.charts import ChordChart


@dataclass(frozen=True)
class ChordChartRequest:
    """A chart for one song in one arrangement style."""
    kind: ClassVar[ArtifactKind] = ArtifactKind.CHORD_CHART

    subject_id: str
    variant_label: str = ""


@dataclass(frozen=True)
class FretboardRequest:
    """A fingering for one chord name."""
    kind: ClassVar[ArtifactKind] = ArtifactKind.FRETBOARD_DIAGRAM

    chord: str


@dataclass(frozen=True, eq=False)
class AccompanimentRequest:
    """Playing suggestions for an already generated chart."""
    kind: ClassVar[ArtifactKind] = ArtifactKind.ACCOMPANIMENT_TEXT

    song_name: str
    artist_name: str
    chart: ChordChart
    variant_label: str = ""


GenerationRequest = Union[ChordChartRequest, FretboardRequest, AccompanimentRequest]


class ArtifactGenerator(ABC):
    """Abstract base for generators. One generator per artifact kind."""

    kind: ClassVar[ArtifactKind]

    @abstractmethod
    async def generate(self, request: GenerationRequest) -> CamelModel:
        """Produce a fresh artifact for ``request``.

        Raises:
            GenerationFailed: If the backend errored or produced nothing usable.
        """
        pass
