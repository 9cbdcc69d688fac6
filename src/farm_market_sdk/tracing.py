from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Mapping

TRACE_HEADER = "X-Trace-ID"
TRACE_HEADER_ALIASES = (TRACE_HEADER, "X-Trace-Id", "x-trace-id", "X-Request-Id")


@dataclass
class TraceContext:
    """Correlation id shared by the REST client and the token verifier."""

    trace_id: str | None = None

    def ensure(self) -> str:
        if not self.trace_id:
            self.trace_id = uuid.uuid4().hex
        return self.trace_id

    def as_headers(self) -> dict[str, str]:
        return {TRACE_HEADER: self.ensure()}

    def update_from_headers(self, headers: Mapping[str, str]) -> None:
        for key in TRACE_HEADER_ALIASES:
            value = headers.get(key)
            if value:
                self.trace_id = value
                return

    def update_from_payload(self, payload: Mapping[str, object]) -> None:
        value = payload.get("trace_id")
        if isinstance(value, str) and value:
            self.trace_id = value
