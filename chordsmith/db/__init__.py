"""
Database module for Chordsmith.

Provides async SQLAlchemy support with PostgreSQL and SQLite.
"""
from __future__ import annotations

from chordsmith.db.database import (
    Base,
    Database,
    create_database,
    get_database,
    get_db,
    init_db,
)
from chordsmith.db.models import CacheEntryRow, SearchTokenRow

__all__ = [
    "Base",
    "Database",
    "create_database",
    "get_database",
    "get_db",
    "init_db",
    "CacheEntryRow",
    "SearchTokenRow",
]
