from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .exceptions import VerificationFailure
from .token_manager import TokenManager

REJECTION_STATUSES = frozenset({401, 403})


@dataclass(frozen=True)
class SessionValidation:
    valid: bool
    reason: str | None = None


class SessionGuard:
    """Gate for protected views.

    Only an explicit 401/403 from the user endpoint evicts the token. A
    transport fault, timeout, cancellation or 5xx leaves it in place and
    reports ``unverified``.
    """

    def __init__(self, tokens: TokenManager, on_invalid_session: Callable[[str], None] | None = None) -> None:
        self._tokens = tokens
        self._on_invalid_session = on_invalid_session

    async def validate(self) -> SessionValidation:
        token = self._tokens.get()
        if not token:
            return SessionValidation(valid=False, reason="missing_token")
        try:
            await self._tokens.context.verifier.verify(token)
        except VerificationFailure as exc:
            if exc.status_code in REJECTION_STATUSES:
                return SessionValidation(valid=False, reason="rejected_token")
            return SessionValidation(valid=False, reason="unverified")
        return SessionValidation(valid=True)

    async def require_session(self, path: str) -> bool:
        validation = await self.validate()
        if validation.valid:
            return True

        if validation.reason == "rejected_token":
            self._tokens.remove()
        self._tokens.redirect_to_login(path)
        if self._on_invalid_session:
            self._on_invalid_session(validation.reason or "invalid_session")
        return False
