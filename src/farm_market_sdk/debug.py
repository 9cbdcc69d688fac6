from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from .logger import get_logger, sanitize

AUTH_URL_MARKERS = ("login", "user", "logout")


@dataclass
class AuthDebugger:
    """Opt-in tracing of authentication traffic.

    Installed as a request interceptor on the verifier (``on_request``) and as
    the ``before_request`` hook of the REST client. Nothing is emitted until
    ``enable()`` is called.
    """

    enabled: bool = False
    logger: logging.Logger = field(default_factory=lambda: get_logger("farm_market_sdk.auth_debug"))

    def enable(self) -> None:
        self.enabled = True
        self.logger.info("[AUTH] debugger enabled")

    def disable(self) -> None:
        self.enabled = False

    def log(self, message: str, data: Any = None) -> None:
        if not self.enabled:
            return
        if data is None:
            self.logger.info("[AUTH] %s", message)
        else:
            self.logger.info("[AUTH] %s %s", message, sanitize(data))

    @staticmethod
    def is_auth_request(url: str) -> bool:
        return any(marker in url for marker in AUTH_URL_MARKERS)

    async def on_request(self, request: httpx.Request) -> None:
        url = str(request.url)
        if self.enabled and self.is_auth_request(url):
            self.logger.info("[FETCH] %s %s %s", request.method, url, _masked_headers(request.headers))

    def before_request(self, method: str, url: str, context: dict[str, Any]) -> None:
        if self.enabled and self.is_auth_request(url):
            headers = context.get("headers") or {}
            self.logger.info("[FETCH] %s %s %s", method, url, _masked_headers(headers))


def _masked_headers(headers: Any) -> dict[str, str]:
    masked: dict[str, str] = {}
    for key, value in dict(headers).items():
        masked[key] = "Bearer ***" if key.lower() == "authorization" else value
    return masked
