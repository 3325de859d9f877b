"""
Access Token Generation and Validation

Provides cryptographically signed JWT tokens identifying a caller by e-mail.
Tokens are self-contained and don't require database storage.
"""
from __future__ import annotations

import logging
import jwt
from datetime import datetime, timedelta, timezone

from typing_extensions import Required, TypedDict

from chordsmith.config import settings

logger = logging.getLogger(__name__)


class AccessCodeError(Exception):
    """Raised when access code validation fails."""
    pass


class TokenClaims(TypedDict, total=False):
    """Decoded JWT payload returned by validate_access_code.

    ``type``, ``iat``, and ``exp`` are always present.
    ``email`` identifies the caller; admin checks compare it against
    ``settings.admin_emails``.
    """

    type: Required[str]
    iat: Required[int]
    exp: Required[int]
    sub: str
    email: str


def _get_secret() -> str:
    """Get the token signing secret, raising if not configured."""
    if not settings.access_token_secret:
        raise AccessCodeError(
            "ACCESS_TOKEN_SECRET not configured. "
            "Generate one with: openssl rand -hex 32"
        )
    return settings.access_token_secret


def generate_access_code(
    email: str | None = None,
    user_id: str | None = None,
    duration_hours: int | None = None,
    duration_days: int | None = None,
    duration_minutes: int | None = None,
) -> str:
    """
    Generate a signed access code (JWT) with the specified duration.

    Args:
        email: E-mail address of the caller (used for admin checks)
        user_id: Optional opaque user id (``sub`` claim)
        duration_hours: Token validity in hours
        duration_days: Token validity in days
        duration_minutes: Token validity in minutes (for testing)

    Returns:
        Signed JWT token string

    Raises:
        AccessCodeError: If no duration specified or secret not configured
    """
    secret = _get_secret()

    total_hours: float = 0.0
    if duration_hours:
        total_hours += duration_hours
    if duration_days:
        total_hours += duration_days * 24
    if duration_minutes:
        total_hours += duration_minutes / 60

    if total_hours <= 0:
        raise AccessCodeError(
            "Must specify at least one of: duration_hours, duration_days, duration_minutes"
        )

    now = datetime.now(timezone.utc)
    expiration = now + timedelta(hours=total_hours)

    payload: dict[str, str | int] = {
        "type": "access",
        "iat": int(now.timestamp()),
        "exp": int(expiration.timestamp()),
    }
    if user_id:
        payload["sub"] = user_id
    if email:
        payload["email"] = email

    return jwt.encode(
        payload,
        secret,
        algorithm=settings.access_token_algorithm,
    )


def validate_access_code(token: str) -> TokenClaims:
    """
    Validate an access code and return its claims.

    Args:
        token: JWT token string

    Returns:
        Decoded token payload dict with keys: type, iat, exp, and optionally sub, email

    Raises:
        AccessCodeError: If token is invalid, expired, or malformed
    """
    secret = _get_secret()

    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[settings.access_token_algorithm],
        )

        # jwt.decode() returns dict[str, Any]; narrow each claim explicitly
        # so malformed tokens raise clear errors instead of being coerced.
        raw_type = payload.get("type")
        if not isinstance(raw_type, str) or raw_type != "access":
            raise AccessCodeError("Invalid token type")

        raw_iat = payload.get("iat", 0)
        raw_exp = payload.get("exp", 0)
        if not isinstance(raw_iat, int) or not isinstance(raw_exp, int):
            raise AccessCodeError("Malformed token: iat/exp must be integers")

        claims = TokenClaims(type=raw_type, iat=raw_iat, exp=raw_exp)

        raw_sub = payload.get("sub")
        if raw_sub is not None:
            if not isinstance(raw_sub, str):
                raise AccessCodeError("Malformed token: sub must be a string")
            claims["sub"] = raw_sub

        raw_email = payload.get("email")
        if raw_email is not None:
            if not isinstance(raw_email, str):
                raise AccessCodeError("Malformed token: email must be a string")
            claims["email"] = raw_email

        return claims

    except jwt.ExpiredSignatureError:
        raise AccessCodeError("Access code has expired")
    except jwt.InvalidTokenError as e:
        raise AccessCodeError(f"Invalid access code: {e}")


def resolve_identity(token: str) -> str | None:
    """
    Return the verified e-mail address behind ``token``, or None.

    Missing, expired, tampered or e-mail-less tokens all resolve to None, as
    does a server without a signing secret.
    """
    if not token:
        return None
    try:
        claims = validate_access_code(token)
    except AccessCodeError as e:
        logger.debug(f"Identity resolution failed: {e}")
        return None
    return claims.get("email")


def get_token_expiration(token: str) -> datetime:
    """
    Get the expiration datetime for a token without fully validating it.
    Useful for displaying expiration info to users.

    Raises:
        AccessCodeError: If token is malformed
    """
    try:
        payload = jwt.decode(
            token,
            options={"verify_signature": False},
        )
        exp_timestamp = payload.get("exp")
        if not exp_timestamp:
            raise AccessCodeError("Token has no expiration")
        return datetime.fromtimestamp(exp_timestamp, tz=timezone.utc)
    except jwt.InvalidTokenError as e:
        raise AccessCodeError(f"Invalid token format: {e}")
