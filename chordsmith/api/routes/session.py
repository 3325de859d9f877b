"""Who-am-I endpoint for the UI's admin controls."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from chordsmith.auth.admin import AdminGate
from chordsmith.auth.dependencies import get_admin_gate, optional_bearer_token
from chordsmith.auth.tokens import resolve_identity
from chordsmith.models.requests import SessionResponse

router = APIRouter()


@router.get("/session", response_model=SessionResponse, response_model_by_alias=True)
async def get_session(
    token: str | None = Depends(optional_bearer_token),
    admin_gate: AdminGate = Depends(get_admin_gate),
) -> SessionResponse:
    """Identity behind the bearer token. Anonymous and invalid tokens look the same."""
    email = resolve_identity(token) if token else None
    if email is None:
        return SessionResponse(is_logged=False)
    return SessionResponse(is_logged=True, email=email, is_admin=admin_gate.is_authorized(token))
