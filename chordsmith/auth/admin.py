"""Admin gate for forced regeneration and deletion."""
from __future__ import annotations

import logging
from collections.abc import Iterable

from chordsmith.auth.tokens import resolve_identity
from chordsmith.config import settings
from chordsmith.ports import IdentityResolver

logger = logging.getLogger(__name__)


class AdminGate:
    """Decides whether an identity token may force-regenerate or delete cached charts."""

    def __init__(
        self,
        allowed_emails: Iterable[str] | None = None,
        resolver: IdentityResolver = resolve_identity,
    ):
        emails = settings.admin_emails if allowed_emails is None else allowed_emails
        self._allowed = frozenset(e.strip().lower() for e in emails if e.strip())
        self._resolver = resolver

    def is_authorized(self, identity_token: str | None) -> bool:
        """True iff the token resolves to an allow-listed identity. Never raises."""
        if not identity_token:
            return False
        try:
            email = self._resolver(identity_token)
        except Exception as e:
            logger.warning(f"Admin check could not resolve identity: {e}")
            return False
        if not email:
            return False
        authorized = email.lower() in self._allowed
        if not authorized:
            logger.warning(f"Admin action refused for {email}")
        return authorized
