from __future__ import annotations

from dataclasses import dataclass, field

import httpx
import pytest

from farm_market_sdk.config import ClientConfig
from farm_market_sdk.navigation import HostNavigator
from farm_market_sdk.storage import MemoryStore
from farm_market_sdk.token_manager import MS_PER_HOUR, SessionContext, TokenManager
from farm_market_sdk.verifier import RemoteAuthVerifier

BASE_URL = "https://api.farm.test"
START_MS = 1_700_000_000_000


@dataclass
class FakeClock:
    now_ms: int = START_MS

    def __call__(self) -> int:
        return self.now_ms

    def advance_hours(self, hours: float) -> None:
        self.now_ms += int(hours * MS_PER_HOUR)


@dataclass
class VerifierStub:
    """MockTransport handler standing in for the user endpoint."""

    status_code: int = 200
    error: BaseException | None = None
    requests: list[httpx.Request] = field(default_factory=list)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, json={"id": 1, "name": "Ada", "email": "ada@farm.test"})

    @property
    def calls(self) -> int:
        return len(self.requests)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def navigator() -> HostNavigator:
    return HostNavigator(location="/sell-crops")


@pytest.fixture
def verifier_stub() -> VerifierStub:
    return VerifierStub()


@pytest.fixture
def verifier(verifier_stub: VerifierStub) -> RemoteAuthVerifier:
    client = httpx.AsyncClient(transport=httpx.MockTransport(verifier_stub))
    return RemoteAuthVerifier(BASE_URL, "/api/user", client=client)


@pytest.fixture
def tokens(store: MemoryStore, navigator: HostNavigator, verifier: RemoteAuthVerifier, clock: FakeClock) -> TokenManager:
    return TokenManager(SessionContext(store=store, navigator=navigator, verifier=verifier, clock=clock))


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(env_name="test", api_base_url=BASE_URL, retries=1, retry_backoff_seconds=0)
