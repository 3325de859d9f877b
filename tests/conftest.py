"""Pytest configuration and fixtures."""
from __future__ import annotations

import logging
from unittest.mock import patch

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.pool import StaticPool

from chordsmith.api.routes import accompaniment, chords, fretboard, library, songs, videos
from chordsmith.auth.admin import AdminGate
from chordsmith.auth.tokens import generate_access_code
from chordsmith.cache.index import RecencyIndex
from chordsmith.cache.kinds import ArtifactKind
from chordsmith.cache.store import GenerationCache
from chordsmith.db import models  # noqa: F401
from chordsmith.db.database import Base, create_database
from chordsmith.main import app
from chordsmith.services.library import LibraryService
from chordsmith.services.orchestrator import GenerationOrchestrator

from tests.fakes import (
    ADMIN_EMAIL,
    SAMPLE_ACCOMPANIMENT,
    SAMPLE_FRETBOARD,
    TOKEN_SECRET,
    USER_EMAIL,
    Clock,
    FakeCatalog,
    FakeYouTube,
    StubGenerator,
    make_chart,
)


def pytest_configure(config):
    """Ensure asyncio_mode is auto so async fixtures work (e.g. in Docker when pyproject not in cwd)."""
    if hasattr(config.option, "asyncio_mode") and config.option.asyncio_mode is None:
        config.option.asyncio_mode = "auto"
    logging.getLogger("httpcore").setLevel(logging.CRITICAL)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _disable_rate_limits():
    """Route limiters keep counts in process memory; tests would trip them."""
    limiters = [m.limiter for m in (accompaniment, chords, fretboard, library, songs, videos)]
    for limiter in limiters:
        limiter.enabled = False
    yield
    for limiter in limiters:
        limiter.enabled = True


# -----------------------------------------------------------------------------
# Store fixtures
# -----------------------------------------------------------------------------

@pytest_asyncio.fixture
async def database():
    """An in-memory SQLite database with the cache tables created."""
    db = create_database("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with db.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield db
    await db.close()


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def track_metadata():
    metadata = FakeCatalog()
    metadata.add("spotify:track:abc", "Perfect", "Ed Sheeran")
    metadata.add("spotify:track:def", "Let It Be", "The Beatles")
    metadata.add("spotify:track:ghi", "Hey Jude", "The Beatles")
    return metadata


@pytest.fixture
def cache(database, track_metadata, clock):
    return GenerationCache(database, track_metadata=track_metadata, clock=clock)


@pytest.fixture
def index(database):
    return RecencyIndex(database, scan_window=2)


# -----------------------------------------------------------------------------
# Auth fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def token_settings():
    """Patch the token module's settings so access codes can be issued and verified."""
    with patch(
        "chordsmith.auth.tokens.settings",
        access_token_secret=TOKEN_SECRET,
        access_token_algorithm="HS256",
    ):
        yield


@pytest.fixture
def admin_token(token_settings):
    return generate_access_code(email=ADMIN_EMAIL, duration_hours=1)


@pytest.fixture
def user_token(token_settings):
    return generate_access_code(email=USER_EMAIL, duration_hours=1)


@pytest.fixture
def admin_gate():
    return AdminGate(allowed_emails=[ADMIN_EMAIL])


# -----------------------------------------------------------------------------
# Orchestrator and app fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def chart_generator():
    return StubGenerator(ArtifactKind.CHORD_CHART, make_chart("C", "G7 Am", "C", unique=["X"]))


@pytest.fixture
def fretboard_generator():
    return StubGenerator(ArtifactKind.FRETBOARD_DIAGRAM, SAMPLE_FRETBOARD)


@pytest.fixture
def accompaniment_generator():
    return StubGenerator(ArtifactKind.ACCOMPANIMENT_TEXT, SAMPLE_ACCOMPANIMENT)


@pytest.fixture
def orchestrator(cache, admin_gate, chart_generator, fretboard_generator, accompaniment_generator):
    generators = {
        g.kind: g for g in (chart_generator, fretboard_generator, accompaniment_generator)
    }
    return GenerationOrchestrator(cache, generators, admin_gate)


@pytest.fixture
def youtube():
    return FakeYouTube()


@pytest_asyncio.fixture
async def client(database, cache, index, track_metadata, orchestrator, admin_gate, youtube):
    """Async test client with every start-up component replaced by test doubles.

    ASGITransport does not run the lifespan, so app.state is populated here.
    """
    app.state.database = database
    app.state.admin_gate = admin_gate
    app.state.orchestrator = orchestrator
    app.state.library = LibraryService(index, cache, track_metadata, catalog=track_metadata)
    app.state.youtube = youtube
    app.state.spotify = None
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
    finally:
        for name in ("database", "admin_gate", "orchestrator", "library", "youtube", "spotify"):
            if hasattr(app.state, name):
                delattr(app.state, name)
