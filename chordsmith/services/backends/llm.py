"""LLM-backed artifact generators."""
from __future__ import annotations

import json
import logging
import re
from pathlib import PurePosixPath
from typing import Any, TypeVar

import httpx
from pydantic import ValidationError

from chordsmith.cache.keys import LOCAL_FILE_PREFIX, is_catalog_subject, is_local_subject, normalize_variant
from chordsmith.cache.kinds import ArtifactKind
from chordsmith.core.llm_client import LLMClient
from chordsmith.errors import GenerationFailed
from chordsmith.models.base import CamelModel
from chordsmith.models.charts import AccompanimentText, ChordChart, FretboardDiagram
from chordsmith.ports import TrackMetadata
from chordsmith.services.backends.base import (
    AccompanimentRequest,
    ArtifactGenerator,
    ChordChartRequest,
    FretboardRequest,
    GenerationRequest,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=CamelModel)

LOCAL_FILE_ARTIST = "Local File"


CHORD_CHART_PROMPT = """You are a musical expert. Write out the chords, the real lyrics and precise timestamps for "{song_name}" by "{artist_name}".

Arrangement style: {arrangement_style}.
- For "Pop Arrangement", use a richer harmony: slash chords (e.g. G/B) for moving basslines, 7ths, 9ths and other extensions.

For every line of the song give:
1. "lyrics": the lyric line.
2. "startTime": when the line starts, in seconds (number).
3. "measures": the chords of the line split into measures. Each measure has
   "chords" (chord names separated by spaces, e.g. "C" or "G Am") and
   "startTime" (when that measure starts, in seconds).

Also give "uniqueChords": every distinct chord name used in the song.

Cover the whole song. Use standard chord names ("C", "G7", "F#m", "C/G").

Example line:
{{"lyrics": "I found a love for me", "startTime": 15.5, "measures": [{{"chords": "C", "startTime": 15.5}}, {{"chords": "G Am", "startTime": 17.0}}]}}

Output ONLY a JSON object with keys "lines" and "uniqueChords"."""


FRETBOARD_PROMPT = """You are an expert guitarist. Give the standard guitar fingering for the chord "{chord}".

Strings are ordered low to high: E A D G B e.
- "frets": 6 integers, -1 for a muted string, 0 for an open string, otherwise the fret number.
- "fingers": 6 integers, 0 for open or muted strings, 1=index, 2=middle, 3=ring, 4=pinky.

For a slash chord such as "C/G" the note after the slash is the lowest note played.

Examples:
Am  -> {{"frets": [-1, 0, 2, 2, 1, 0], "fingers": [0, 0, 2, 3, 1, 0]}}
F   -> {{"frets": [1, 3, 3, 2, 1, 1], "fingers": [1, 3, 4, 2, 1, 1]}}
C/G -> {{"frets": [3, 3, 2, 0, 1, 0], "fingers": [3, 4, 2, 0, 1, 0]}}

Use the simplest, most common voicing. Output ONLY a JSON object with keys "frets" and "fingers"."""


ACCOMPANIMENT_PROMPT = """You are an expert guitar teacher. The song "{song_name}" by "{artist_name}" has this chord progression (one line per lyric line, measures separated by "|"):

{chord_progression}

Give practical accompaniment advice for the arrangement style "{arrangement_style}":
1. "playingStyleSuggestion": the overall feel and dynamics (e.g. soft verses building into the chorus).
2. "strummingPattern": one versatile pattern in "D DU UDU" notation (D=down, U=up).
3. "advancedTechniques" (optional): for "Pop Arrangement", embellishments such as palm muting, a fingerpicking pattern for the verse, or hammer-ons on a chord change.

Be concise and encouraging. Output ONLY a JSON object with those keys."""


def parse_json_object(content: str) -> dict[str, Any] | None:
    """Extract a JSON object from an LLM response."""
    try:
        data = json.loads(content)
        if isinstance(data, dict):
            return data
    except json.JSONDecodeError:
        pass

    # Models sometimes wrap the object in prose or a code fence
    match = re.search(r"\{[\s\S]*\}", content)
    if match:
        try:
            data = json.loads(match.group())
            if isinstance(data, dict):
                return data
        except json.JSONDecodeError:
            pass
    return None


def local_song_name(subject_id: str) -> str:
    """Song name for an upload: the file name without its extension."""
    name = subject_id[len(LOCAL_FILE_PREFIX):]
    return PurePosixPath(name).stem or name


class LLMGenerator(ArtifactGenerator):
    """Shared prompt-and-parse logic for the LLM generators."""

    temperature: float | None = None

    def __init__(self, client: LLMClient):
        self.client = client

    async def _complete(self, prompt: str, model: type[ModelT]) -> ModelT:
        try:
            response = await self.client.chat_completion(
                messages=[{"role": "user", "content": prompt}],
                temperature=self.temperature,
                json_mode=True,
            )
        except httpx.HTTPError as e:
            logger.exception(f"LLM {self.kind.value} generation failed: {e}")
            raise GenerationFailed(f"Model request failed: {e}") from e

        content = response.content or ""
        data = parse_json_object(content)
        if data is None:
            logger.error(f"LLM {self.kind.value} response was not JSON: {content[:200]!r}")
            raise GenerationFailed("Failed to parse model response")
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.error(f"LLM {self.kind.value} response failed validation: {e}")
            raise GenerationFailed("Model response did not match the expected shape") from e


class LLMChordChartGenerator(LLMGenerator):
    """Chord charts for catalog tracks and local uploads."""

    kind = ArtifactKind.CHORD_CHART

    def __init__(self, client: LLMClient, track_metadata: TrackMetadata):
        super().__init__(client)
        self.track_metadata = track_metadata

    async def generate(self, request: GenerationRequest) -> ChordChart:
        if not isinstance(request, ChordChartRequest):
            raise TypeError(f"Expected ChordChartRequest, got {type(request).__name__}")
        song_name, artist_name = await self._describe_subject(request.subject_id)
        prompt = CHORD_CHART_PROMPT.format(
            song_name=song_name,
            artist_name=artist_name,
            arrangement_style=normalize_variant(request.variant_label),
        )
        chart = await self._complete(prompt, ChordChart)
        if not chart.lines and not chart.unique_chords:
            raise GenerationFailed(f"Model returned an empty chart for {request.subject_id}")
        return chart

    async def _describe_subject(self, subject_id: str) -> tuple[str, str]:
        if is_catalog_subject(subject_id):
            track = await self.track_metadata.get_track(subject_id)
            if track is None:
                raise GenerationFailed(f"Could not retrieve song details for {subject_id}")
            return track.name, track.artist_line
        if is_local_subject(subject_id):
            return local_song_name(subject_id), LOCAL_FILE_ARTIST
        raise GenerationFailed(f"Unsupported song identifier: {subject_id}")


class LLMFretboardGenerator(LLMGenerator):
    """Fingerings for single chords."""

    kind = ArtifactKind.FRETBOARD_DIAGRAM
    temperature = 0.1

    async def generate(self, request: GenerationRequest) -> FretboardDiagram:
        if not isinstance(request, FretboardRequest):
            raise TypeError(f"Expected FretboardRequest, got {type(request).__name__}")
        if not request.chord.strip():
            raise GenerationFailed("Chord name is empty")
        return await self._complete(FRETBOARD_PROMPT.format(chord=request.chord), FretboardDiagram)


class LLMAccompanimentTextGenerator(LLMGenerator):
    """Strumming and playing-style suggestions for a chart."""

    kind = ArtifactKind.ACCOMPANIMENT_TEXT

    async def generate(self, request: GenerationRequest) -> AccompanimentText:
        if not isinstance(request, AccompanimentRequest):
            raise TypeError(f"Expected AccompanimentRequest, got {type(request).__name__}")
        if not request.chart.has_chords():
            raise GenerationFailed("Cannot suggest an accompaniment for empty chord data")
        prompt = ACCOMPANIMENT_PROMPT.format(
            song_name=request.song_name,
            artist_name=request.artist_name,
            chord_progression=request.chart.progression_text(),
            arrangement_style=normalize_variant(request.variant_label),
        )
        return await self._complete(prompt, AccompanimentText)
