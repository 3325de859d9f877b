"""
FastAPI Authentication Dependencies

Bearer-token extraction for endpoints whose behaviour depends on who is
calling. Generation endpoints are public; only forced regeneration and
deletion consult the token, through ``AdminGate``.
"""
from __future__ import annotations

import logging

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from chordsmith.auth.admin import AdminGate

logger = logging.getLogger(__name__)

# HTTPBearer extracts the token from "Authorization: Bearer <token>" header
# auto_error=False lets anonymous callers through; admin checks reject them later
security = HTTPBearer(auto_error=False)


async def optional_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str | None:
    """The raw bearer token, or None for anonymous callers."""
    if credentials is None:
        return None
    return credentials.credentials


async def require_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str:
    """
    The raw bearer token.

    Raises:
        HTTPException 401: If no token is present
    """
    if credentials is None:
        logger.warning("Admin endpoint called without token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access code required.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return credentials.credentials


def get_admin_gate(request: Request) -> AdminGate:
    """The process-wide AdminGate built at start-up."""
    gate: AdminGate | None = getattr(request.app.state, "admin_gate", None)
    if gate is None:
        raise RuntimeError("AdminGate not initialized")
    return gate
