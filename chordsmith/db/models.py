"""
SQLAlchemy ORM models for the generation cache.

Tables:
- generation_cache: one row per cached artifact, keyed by (namespace, storage_id)
- generation_cache_search_tokens: search tokens of chord-chart rows, one per row

The namespace column holds the ``ArtifactKind`` value, so each artifact kind is
a separate logical table sharing one physical table.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import (
    DateTime,
    ForeignKeyConstraint,
    Index,
    Integer,
    String,
)
from sqlalchemy.types import JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship

from chordsmith.db.database import Base


def utc_now() -> datetime:
    """Get current UTC timestamp."""
    return datetime.now(timezone.utc)


class CacheEntryRow(Base):
    """
    A cached artifact.

    ``payload`` holds the artifact as stored (snake_case JSON). Provenance
    columns are only populated for chord charts, where they back the library
    views: ``created_at`` orders the recent list and ``search_tokens`` drive
    search.
    """
    __tablename__ = "generation_cache"

    namespace: Mapped[str] = mapped_column(String(32), primary_key=True)
    storage_id: Mapped[str] = mapped_column(String(512), primary_key=True)

    payload: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)

    # Provenance (chord charts)
    subject_id: Mapped[str | None] = mapped_column(String(512), nullable=True)
    variant_label: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )

    search_tokens: Mapped[list["SearchTokenRow"]] = relationship(
        "SearchTokenRow",
        back_populates="entry",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_generation_cache_namespace_created_at", "namespace", "created_at"),
    )

    @property
    def token_set(self) -> set[str]:
        return {t.token for t in self.search_tokens}

    def __repr__(self) -> str:
        return f"<CacheEntryRow {self.namespace}/{self.storage_id}>"


class SearchTokenRow(Base):
    """One lower-cased search token (track title or artist name) of a chart."""
    __tablename__ = "generation_cache_search_tokens"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    namespace: Mapped[str] = mapped_column(String(32), nullable=False)
    storage_id: Mapped[str] = mapped_column(String(512), nullable=False)
    token: Mapped[str] = mapped_column(String(512), nullable=False, index=True)

    entry: Mapped["CacheEntryRow"] = relationship(
        "CacheEntryRow",
        back_populates="search_tokens",
    )

    __table_args__ = (
        ForeignKeyConstraint(
            ["namespace", "storage_id"],
            ["generation_cache.namespace", "generation_cache.storage_id"],
            ondelete="CASCADE",
        ),
    )

    def __repr__(self) -> str:
        return f"<SearchTokenRow {self.storage_id} {self.token!r}>"
