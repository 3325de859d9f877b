"""
Chordsmith API

FastAPI application serving cached, LLM-generated chord charts.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator
from typing import Awaitable, Callable

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from chordsmith.auth.admin import AdminGate
from chordsmith.cache.index import RecencyIndex
from chordsmith.cache.kinds import ArtifactKind
from chordsmith.cache.store import GenerationCache
from chordsmith.config import settings
from chordsmith.api.routes import accompaniment, chords, fretboard, health, library, session, songs, videos
from chordsmith.core.llm_client import LLMClient
from chordsmith.db import init_db
from chordsmith.services.backends.base import ArtifactGenerator
from chordsmith.services.backends.llm import (
    LLMAccompanimentTextGenerator,
    LLMChordChartGenerator,
    LLMFretboardGenerator,
)
from chordsmith.services.library import LibraryService
from chordsmith.services.orchestrator import GenerationOrchestrator
from chordsmith.services.spotify import SpotifyClient
from chordsmith.services.youtube import YouTubeClient


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        response = await call_next(request)

        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = (
            "accelerometer=(), camera=(), geolocation=(), "
            "gyroscope=(), magnetometer=(), microphone=(), "
            "payment=(), usb=()"
        )
        return response


# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Rate limiter - uses IP address as key
limiter = Limiter(key_func=get_remote_address)


def build_generators(llm: LLMClient | None, spotify: SpotifyClient) -> dict[ArtifactKind, ArtifactGenerator]:
    """One LLM generator per artifact kind, or none without an API key."""
    if llm is None:
        return {}
    generators: list[ArtifactGenerator] = [
        LLMChordChartGenerator(llm, spotify),
        LLMFretboardGenerator(llm),
        LLMAccompanimentTextGenerator(llm),
    ]
    return {g.kind: g for g in generators}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler: builds and tears down every component."""
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"LLM provider: {settings.llm_provider}")
    logger.info(f"LLM model: {settings.llm_model}")

    try:
        database = await init_db()
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise

    spotify = SpotifyClient()
    if not spotify.configured:
        logger.warning("Spotify credentials not set; catalog lookups will return nothing")
    youtube = YouTubeClient()

    llm: LLMClient | None = None
    if settings.openrouter_api_key:
        llm = LLMClient()
    else:
        logger.warning("OpenRouter API key not set; generation is disabled, cached entries are still served")

    cache = GenerationCache(database, track_metadata=spotify)
    index = RecencyIndex(database)
    admin_gate = AdminGate()

    app.state.database = database
    app.state.spotify = spotify
    app.state.youtube = youtube
    app.state.admin_gate = admin_gate
    app.state.orchestrator = GenerationOrchestrator(cache, build_generators(llm, spotify), admin_gate)
    app.state.library = LibraryService(index, cache, spotify, catalog=spotify)

    yield

    # Cleanup
    logger.info("Shutting down...")
    if llm is not None:
        await llm.close()
    await spotify.close()
    await youtube.close()
    await database.close()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Chord charts, fingerings and playing tips, generated once and cached.",
    lifespan=lifespan,
    # Disable public docs in production; set CHORDSMITH_DEBUG=true locally to enable
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    openapi_url="/openapi.json" if settings.debug else None,
)

# Add rate limiter to app state and exception handler
app.state.limiter = limiter
app.add_exception_handler(
    RateLimitExceeded,
    _rate_limit_exceeded_handler,  # type: ignore[arg-type]  # slowapi handler signature is (Request, RateLimitExceeded) not (Request, Exception)
)

# Security headers middleware (added first, runs last)
app.add_middleware(SecurityHeadersMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, prefix="/api/v1", tags=["health"])
app.include_router(chords.router, prefix="/api/v1", tags=["chords"])
app.include_router(fretboard.router, prefix="/api/v1", tags=["fretboard"])
app.include_router(accompaniment.router, prefix="/api/v1", tags=["accompaniment"])
app.include_router(library.router, prefix="/api/v1", tags=["library"])
app.include_router(songs.router, prefix="/api/v1", tags=["songs"])
app.include_router(videos.router, prefix="/api/v1", tags=["videos"])
app.include_router(session.router, prefix="/api/v1", tags=["session"])


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with service info."""
    return {
        "service": settings.app_name,
        "version": settings.app_version,
    }
