"""Session token lifecycle: store, read with lazy expiry, verify, evict.

Two keys are written on every ``store``. ``access_token`` holds the bare
token so older readers keep working, and ``token_data`` holds the
JSON-encoded ``TokenRecord`` with its expiry. Reads prefer the structured
record and fall back to the bare token when the record is missing or
corrupt. A bare token without a record never expires on its own.

Nothing is cached in memory: every call goes back to the store.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from .exceptions import MalformedRecord, StorageUnavailable, VerificationFailure
from .logger import get_logger, log_event
from .models import TokenRecord
from .navigation import Navigator, build_login_url
from .storage import KeyValueStore
from .verifier import RemoteAuthVerifier

LEGACY_KEY = "access_token"
STRUCTURED_KEY = "token_data"
DEFAULT_TTL_HOURS = 12.0
MS_PER_HOUR = 3_600_000

MODULE = "token_manager"


def epoch_millis() -> int:
    return int(time.time() * 1000)


@dataclass
class SessionContext:
    store: KeyValueStore
    navigator: Navigator
    verifier: RemoteAuthVerifier
    clock: Callable[[], int] = epoch_millis
    default_ttl_hours: float = DEFAULT_TTL_HOURS
    login_path: str = "/login"
    logger: logging.Logger = field(default_factory=lambda: get_logger("farm_market_sdk.token"))


class TokenManager:
    def __init__(self, context: SessionContext) -> None:
        self.context = context
        self._log = context.logger

    def store(self, token: str, ttl_hours: float | None = None) -> None:
        """Persist ``token`` with an absolute expiry, replacing any previous one.

        Raises ``StorageUnavailable`` if the store rejects the write; in that
        case both keys are cleared so no half-written session survives.
        """
        if not token:
            raise ValueError("token must be a non-empty string")
        hours = self.context.default_ttl_hours if ttl_hours is None else ttl_hours
        if hours <= 0:
            raise ValueError(f"ttl_hours must be > 0, got {hours}")

        expires_at_ms = self.context.clock() + int(hours * MS_PER_HOUR)
        record = TokenRecord(token=token, expires_at_ms=expires_at_ms)
        try:
            self._write(LEGACY_KEY, token)
            self._write(STRUCTURED_KEY, record.dumps())
        except StorageUnavailable:
            self._discard_partial_write()
            raise

        log_event(
            self._log,
            module=MODULE,
            action="store_token",
            outcome="stored",
            ttl_hours=hours,
            expires_at=_iso(expires_at_ms),
        )

    def get(self) -> str | None:
        try:
            raw = self.context.store.get(STRUCTURED_KEY)
        except (StorageUnavailable, OSError) as exc:
            self._warn("get_token", "store_unavailable", error=str(exc))
            return None

        if raw is None:
            return self._read_legacy()

        try:
            record = TokenRecord.parse(raw)
        except MalformedRecord as exc:
            self._warn("get_token", "malformed_record", error=str(exc))
            return self._read_legacy()

        if record.is_expired(self.context.clock()):
            log_event(
                self._log,
                module=MODULE,
                action="get_token",
                outcome="expired",
                expired_at=_iso(record.expires_at_ms),
            )
            try:
                self.remove()
            except StorageUnavailable as exc:
                self._warn("remove_token", "store_unavailable", error=str(exc))
            return None
        return record.token

    def expires_at(self) -> int | None:
        try:
            raw = self.context.store.get(STRUCTURED_KEY)
        except (StorageUnavailable, OSError):
            return None
        if raw is None:
            return None
        try:
            return TokenRecord.parse(raw).expires_at_ms
        except MalformedRecord:
            return None

    def remove(self) -> None:
        """Delete both keys. Every key is attempted; the first failure is re-raised."""
        first_error: StorageUnavailable | None = None
        for key in (LEGACY_KEY, STRUCTURED_KEY):
            try:
                self.context.store.remove(key)
            except StorageUnavailable as exc:
                first_error = first_error or exc
            except OSError as exc:
                wrapped = StorageUnavailable(f"cannot remove {key}: {exc}")
                wrapped.__cause__ = exc
                first_error = first_error or wrapped
        if first_error is not None:
            raise first_error

    async def is_valid(self) -> bool:
        token = self.get()
        if not token:
            return False
        try:
            await self.context.verifier.verify(token)
        except VerificationFailure as exc:
            self._warn(
                "verify_token",
                "verification_failed",
                reason=exc.reason,
                status_code=exc.status_code,
            )
            return False
        return True

    def redirect_to_login(self, return_path: str | None = None) -> None:
        target = return_path or self.context.navigator.current_path()
        self.context.navigator.navigate(build_login_url(target, self.context.login_path))

    def handle_auth_error(self) -> None:
        try:
            self.remove()
        except StorageUnavailable as exc:
            self._warn("handle_auth_error", "store_unavailable", error=str(exc))
        self.redirect_to_login()

    def _write(self, key: str, value: str) -> None:
        try:
            self.context.store.set(key, value)
        except StorageUnavailable:
            raise
        except OSError as exc:
            raise StorageUnavailable(f"cannot write {key}: {exc}") from exc

    def _read_legacy(self) -> str | None:
        try:
            return self.context.store.get(LEGACY_KEY)
        except (StorageUnavailable, OSError) as exc:
            self._warn("get_token", "store_unavailable", error=str(exc))
            return None

    def _discard_partial_write(self) -> None:
        try:
            self.remove()
        except StorageUnavailable as exc:
            self._warn("store_token", "rollback_failed", error=str(exc))

    def _warn(self, action: str, outcome: str, **fields: object) -> None:
        log_event(self._log, module=MODULE, action=action, outcome=outcome, level=logging.WARNING, **fields)


def _iso(epoch_ms: int | None) -> str | None:
    if epoch_ms is None:
        return None
    return datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc).isoformat()
