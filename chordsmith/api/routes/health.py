"""Health check endpoints."""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request

from chordsmith.config import settings

router = APIRouter()


def _llm_configured() -> bool:
    """True if the configured LLM provider has an API key set (OpenRouter)."""
    return settings.llm_provider == "openrouter" and bool(settings.openrouter_api_key)


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Basic health check."""
    return {
        "status": "ok",
        "service": settings.app_name,
        "version": settings.app_version,
    }


@router.get("/health/full")
async def full_health_check(request: Request) -> dict[str, Any]:
    """
    Full health check including dependencies.

    Reports:
    - LLM: configured (OpenRouter API key present)
    - Catalog: client credentials present
    - Database: reachable
    """
    llm_ok = _llm_configured()
    spotify = getattr(request.app.state, "spotify", None)
    catalog_ok = bool(spotify and spotify.configured)
    database = getattr(request.app.state, "database", None)
    db_ok = bool(database and await database.ping())

    all_ok = llm_ok and catalog_ok and db_ok

    return {
        "status": "ok" if all_ok else "degraded",
        "service": settings.app_name,
        "version": settings.app_version,
        "dependencies": {
            "llm": {
                "status": "ok" if llm_ok else "unconfigured",
                "provider": settings.llm_provider,
                "model": settings.llm_model,
            },
            "catalog": {"status": "ok" if catalog_ok else "unconfigured"},
            "database": {"status": "ok" if db_ok else "unavailable"},
        },
    }
