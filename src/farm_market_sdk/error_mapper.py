"""Turn a non-2xx Farm Market API answer into an ``ApiError``.

The Laravel backend rarely sends a machine-readable ``code``; it answers
with ``message`` and, for validation failures, an ``errors`` map. When the
payload carries no code, one is derived from the status so callers can
branch on ``exc.code`` without inspecting status numbers.
"""

from __future__ import annotations

from typing import Mapping, NamedTuple

from .exceptions import (
    ApiError,
    AuthError,
    ConflictError,
    NotFoundError,
    PermissionError,
    RateLimitError,
    ServerError,
    ValidationError,
)


class ErrorKind(NamedTuple):
    exc_type: type[ApiError]
    code: str


STATUS_KINDS: dict[int, ErrorKind] = {
    400: ErrorKind(ValidationError, "VALIDATION_ERROR"),
    401: ErrorKind(AuthError, "UNAUTHENTICATED"),
    403: ErrorKind(PermissionError, "FORBIDDEN"),
    404: ErrorKind(NotFoundError, "NOT_FOUND"),
    409: ErrorKind(ConflictError, "CONFLICT"),
    422: ErrorKind(ValidationError, "VALIDATION_ERROR"),
    429: ErrorKind(RateLimitError, "TOO_MANY_REQUESTS"),
}
SERVER_KIND = ErrorKind(ServerError, "SERVER_ERROR")
FALLBACK_KIND = ErrorKind(ApiError, "HTTP_ERROR")


def classify_status(status_code: int) -> ErrorKind:
    if status_code in STATUS_KINDS:
        return STATUS_KINDS[status_code]
    if status_code >= 500:
        return SERVER_KIND
    return FALLBACK_KIND


def map_error(status_code: int, payload: Mapping[str, object] | None, trace_id: str | None) -> ApiError:
    payload = payload or {}
    kind = classify_status(status_code)
    payload_trace_id = payload.get("trace_id")
    return kind.exc_type(
        code=str(payload.get("code") or kind.code),
        message=str(payload.get("message") or "Request failed"),
        details=payload.get("details") or payload.get("errors"),
        trace_id=str(payload_trace_id) if payload_trace_id is not None else trace_id,
        status_code=status_code,
        raw_payload=dict(payload),
    )
