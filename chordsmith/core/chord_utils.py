"""
Chord-chart post-processing.

The model's own ``uniqueChords`` list is unreliable (missing chords, chords
that never appear in the measures), so the list is always rebuilt from the
measure cells before a chart is stored or returned.
"""
from chordsmith.models.charts import ChordChart


def split_chord_cell(cell: str) -> list[str]:
    """Split a measure cell like "G7 Am" into chord names."""
    return [c.strip() for c in cell.split() if c.strip()]


def unique_chords_from_lines(chart: ChordChart) -> list[str]:
    """Chord names across every measure, in order of first appearance."""
    seen: dict[str, None] = {}
    for line in chart.lines:
        for measure in line.measures:
            for chord in split_chord_cell(measure.chords or ""):
                seen.setdefault(chord, None)
    return list(seen)


def dedupe_chords(chords: list[str]) -> list[str]:
    """Trim, drop empties and de-duplicate, keeping first occurrences."""
    seen: dict[str, None] = {}
    for chord in chords:
        name = chord.strip()
        if name:
            seen.setdefault(name, None)
    return list(seen)


def normalize_chart(chart: ChordChart) -> ChordChart:
    """Return ``chart`` with an authoritative ``unique_chords`` list.

    With lines present the list is recomputed from the measures and the
    generator's list is discarded. Without lines the generator's list is the
    only source, so it is trimmed and de-duplicated instead.
    """
    if chart.lines:
        unique = unique_chords_from_lines(chart)
    else:
        unique = dedupe_chords(chart.unique_chords)
    return chart.model_copy(update={"unique_chords": unique})
