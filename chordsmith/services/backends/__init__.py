"""Artifact generator backends."""
from chordsmith.services.backends.base import (
    AccompanimentRequest,
    ArtifactGenerator,
    ChordChartRequest,
    FretboardRequest,
    GenerationRequest,
)
from chordsmith.services.backends.llm import (
    LLMAccompanimentTextGenerator,
    LLMChordChartGenerator,
    LLMFretboardGenerator,
)

__all__ = [
    "AccompanimentRequest",
    "ArtifactGenerator",
    "ChordChartRequest",
    "FretboardRequest",
    "GenerationRequest",
    "LLMAccompanimentTextGenerator",
    "LLMChordChartGenerator",
    "LLMFretboardGenerator",
]
