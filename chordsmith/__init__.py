"""Chordsmith: AI chord charts with a generation cache."""
