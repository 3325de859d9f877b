"""
Chordsmith Authentication Module

Provides JWT-based identity tokens and the admin gate.
"""
from chordsmith.auth.tokens import (
    generate_access_code,
    validate_access_code,
    resolve_identity,
    AccessCodeError,
)
from chordsmith.auth.admin import AdminGate
from chordsmith.auth.dependencies import optional_bearer_token, require_bearer_token

__all__ = [
    "generate_access_code",
    "validate_access_code",
    "resolve_identity",
    "AccessCodeError",
    "AdminGate",
    "optional_bearer_token",
    "require_bearer_token",
]
