from __future__ import annotations

import json
import platform
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from time import perf_counter
from typing import Any

from .exceptions import VerificationFailure
from .token_manager import TokenManager
from .verifier import RemoteAuthVerifier

PREVIEW_CHARS = 10


@dataclass(frozen=True)
class AuthDiagnostic:
    status: str
    token_present: bool
    token_preview: str | None
    expires_at: str | None
    verify_url: str
    status_code: int | None
    latency_ms: int | None
    message: str
    checked_at: str


def preview(token: str) -> str:
    return f"{token[:PREVIEW_CHARS]}..." if len(token) > PREVIEW_CHARS else "***"


async def run_auth_diagnostic(tokens: TokenManager, verifier: RemoteAuthVerifier) -> AuthDiagnostic:
    """Inspect the stored credential and call the user endpoint once.

    Unlike ``SessionGuard`` this never evicts the token.
    """
    checked_at = datetime.now(timezone.utc).isoformat()
    token = tokens.get()
    expires_ms = tokens.expires_at()
    expires_at = (
        datetime.fromtimestamp(expires_ms / 1000, tz=timezone.utc).isoformat() if expires_ms is not None else None
    )
    if not token:
        return AuthDiagnostic(
            status="no_token",
            token_present=False,
            token_preview=None,
            expires_at=None,
            verify_url=verifier.url,
            status_code=None,
            latency_ms=None,
            message="No token stored. Log in first.",
            checked_at=checked_at,
        )

    started = perf_counter()
    try:
        await verifier.verify(token)
    except VerificationFailure as exc:
        latency_ms = int((perf_counter() - started) * 1000)
        rejected = exc.status_code is not None
        return AuthDiagnostic(
            status="rejected" if rejected else "unreachable",
            token_present=True,
            token_preview=preview(token),
            expires_at=expires_at,
            verify_url=verifier.url,
            status_code=exc.status_code,
            latency_ms=latency_ms if rejected else None,
            message=str(exc),
            checked_at=checked_at,
        )
    return AuthDiagnostic(
        status="authenticated",
        token_present=True,
        token_preview=preview(token),
        expires_at=expires_at,
        verify_url=verifier.url,
        status_code=200,
        latency_ms=int((perf_counter() - started) * 1000),
        message="Token accepted by the user endpoint",
        checked_at=checked_at,
    )


def build_report(diagnostic: AuthDiagnostic, *, environment: str) -> dict[str, Any]:
    report = asdict(diagnostic)
    report["environment"] = environment
    report["os"] = platform.platform()
    return report


def report_to_text(report: dict[str, Any]) -> str:
    lines = ["Farm Market - auth diagnostic"]
    for key, value in report.items():
        serialized = json.dumps(value) if isinstance(value, (dict, list)) else str(value)
        lines.append(f"{key}: {serialized}")
    return "\n".join(lines)

