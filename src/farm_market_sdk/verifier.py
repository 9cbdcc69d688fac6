from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence

import httpx

from .config import ClientConfig
from .exceptions import VerificationFailure
from .tracing import TraceContext

RequestInterceptor = Callable[[httpx.Request], Awaitable[None]]


class RemoteAuthVerifier:
    """Checks a bearer token against the user endpoint.

    A 2xx answer means the token is accepted. Any other status, a transport
    fault, or cancellation of the in-flight request raises
    ``VerificationFailure``. There is no retry.
    """

    def __init__(
        self,
        base_url: str,
        path: str = "/api/user",
        *,
        timeout: float | None = None,
        verify_ssl: bool = True,
        client: httpx.AsyncClient | None = None,
        interceptors: Sequence[RequestInterceptor] = (),
        trace: TraceContext | None = None,
    ) -> None:
        self.url = f"{base_url.rstrip('/')}/{path.lstrip('/')}"
        self.trace = trace
        self._owns_client = client is None
        if client is None:
            client_kwargs = {"verify": verify_ssl}
            if timeout is not None:
                client_kwargs["timeout"] = timeout
            client = httpx.AsyncClient(**client_kwargs)
        if interceptors:
            hooks = client.event_hooks
            client.event_hooks = {
                "request": [*hooks.get("request", []), *interceptors],
                "response": list(hooks.get("response", [])),
            }
        self._client = client

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        *,
        client: httpx.AsyncClient | None = None,
        interceptors: Sequence[RequestInterceptor] = (),
        trace: TraceContext | None = None,
    ) -> "RemoteAuthVerifier":
        return cls(
            config.api_base_url,
            config.verify_path,
            timeout=config.timeout_seconds,
            verify_ssl=config.verify_ssl,
            client=client,
            interceptors=interceptors,
            trace=trace,
        )

    async def verify(self, token: str) -> None:
        headers = {"Authorization": f"Bearer {token}", "Accept": "application/json"}
        if self.trace is not None:
            headers.update(self.trace.as_headers())
        try:
            response = await self._client.get(self.url, headers=headers)
        except httpx.TimeoutException as exc:
            raise VerificationFailure("timeout") from exc
        except httpx.HTTPError as exc:
            raise VerificationFailure(f"transport_error: {type(exc).__name__}") from exc
        except asyncio.CancelledError as exc:
            raise VerificationFailure("cancelled") from exc
        if self.trace is not None:
            self.trace.update_from_headers(response.headers)
        if not response.is_success:
            raise VerificationFailure("rejected", status_code=response.status_code)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
