"""Cache key derivation.

Keys are pure functions of their inputs so that identical requests always land
on the same cache entry. The formats below are shared with existing stored
data and must not change:

    chord chart     <subject_id>[-<variant_label>]
    fretboard       <chord_name>
    accompaniment   <chord>-<chord>-...-<variant_label>

Every key is passed through ``sanitize`` before it touches the store.
"""
from __future__ import annotations

from collections.abc import Iterable

from chordsmith.config import DEFAULT_VARIANT_LABEL

CATALOG_URI_PREFIX = "spotify:"
LOCAL_FILE_PREFIX = "local:file:"

# Characters that storage ids may not contain.
_UNSAFE_CHARS = ("/", ":")


def normalize_variant(variant_label: str | None) -> str:
    """Return the variant label recorded on an entry (``Standard`` when empty)."""
    return variant_label or DEFAULT_VARIANT_LABEL


def is_catalog_subject(subject_id: str) -> bool:
    """True for catalog-backed tracks, the only subjects whose charts are cached."""
    return subject_id.startswith(CATALOG_URI_PREFIX)


def is_local_subject(subject_id: str) -> bool:
    return subject_id.startswith(LOCAL_FILE_PREFIX)


def local_subject_id(file_name: str) -> str:
    """Build the synthetic subject id used for an uploaded file."""
    return f"{LOCAL_FILE_PREFIX}{file_name}"


def derive_chord_chart_key(subject_id: str, variant_label: str | None = "") -> str:
    """Key for a chord chart: the subject id, suffixed with the variant when one is given."""
    if variant_label:
        return f"{subject_id}-{variant_label}"
    return subject_id


def derive_fretboard_key(chord_name: str) -> str:
    """Key for a fretboard diagram: the chord name itself."""
    return chord_name


def derive_accompaniment_key(unique_chords: Iterable[str], variant_label: str | None = "") -> str:
    """Key for accompaniment text: the chords joined in the order given, then the variant."""
    return f"{'-'.join(unique_chords)}-{normalize_variant(variant_label)}"


def sanitize(raw_key: str) -> str:
    """Turn a derived key into a storage id (no ``/`` or ``:``)."""
    storage_id = raw_key
    for ch in _UNSAFE_CHARS:
        storage_id = storage_id.replace(ch, "-")
    return storage_id


def extract_search_tokens(track_title: str, artist_names: Iterable[str]) -> set[str]:
    """Lower-cased title and artist names, matched verbatim by library search."""
    tokens = {track_title.lower()}
    tokens.update(name.lower() for name in artist_names)
    tokens.discard("")
    return tokens
