"""Chordsmith services: catalog and video clients, generators, orchestration."""
