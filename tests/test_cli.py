from __future__ import annotations

import json

import pytest
import responses

from farm_market_sdk.cli import main
from farm_market_sdk.session import FarmMarketSession
from farm_market_sdk.storage import FileStore
from farm_market_sdk.token_manager import LEGACY_KEY

API = "https://api.farm.test"


@pytest.fixture(autouse=True)
def cli_env(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FARM_MARKET_API_BASE_URL", API)
    monkeypatch.setenv("FARM_MARKET_STORE_DIR", str(tmp_path))
    monkeypatch.setenv("FARM_MARKET_RETRIES", "0")


def test_status_without_token(capsys) -> None:
    assert main(["status", "--json"]) == 2

    report = json.loads(capsys.readouterr().out)
    assert report["status"] == "no_token"


@responses.activate
def test_login_persists_token(tmp_path, capsys) -> None:
    responses.add(
        responses.POST,
        f"{API}/api/login",
        json={"token": "cli-token", "user": {"id": 1, "name": "Ada", "email": "ada@farm.test"}},
        status=200,
    )

    assert main(["login", "--email", "ada@farm.test", "--password", "pw", "--ttl-hours", "2"]) == 0

    assert FileStore(tmp_path).get(LEGACY_KEY) == "cli-token"
    output = json.loads(capsys.readouterr().out)
    assert output["user"]["name"] == "Ada"
    assert output["expires_at"] is not None


@responses.activate
def test_login_failure_exits_non_zero(capsys) -> None:
    responses.add(responses.POST, f"{API}/api/login", json={"message": "Invalid credentials"}, status=401)

    assert main(["login", "--email", "ada@farm.test", "--password", "bad"]) == 1
    assert "Invalid credentials" in capsys.readouterr().out


@responses.activate
def test_failed_login_keeps_existing_token(tmp_path) -> None:
    FileStore(tmp_path).set(LEGACY_KEY, "good-token")
    responses.add(responses.POST, f"{API}/api/login", json={"message": "Invalid credentials"}, status=401)

    assert main(["login", "--email", "ada@farm.test", "--password", "typo"]) == 1

    assert FileStore(tmp_path).get(LEGACY_KEY) == "good-token"


@pytest.fixture
def closed_sessions(monkeypatch: pytest.MonkeyPatch) -> list[FarmMarketSession]:
    closed: list[FarmMarketSession] = []
    original = FarmMarketSession.aclose

    async def recording_aclose(self: FarmMarketSession) -> None:
        closed.append(self)
        await original(self)

    monkeypatch.setattr(FarmMarketSession, "aclose", recording_aclose)
    return closed


@responses.activate
@pytest.mark.parametrize("status", [200, 401])
def test_login_closes_clients(closed_sessions, status: int) -> None:
    responses.add(responses.POST, f"{API}/api/login", json={"token": "cli-token", "message": "no"}, status=status)

    main(["login", "--email", "ada@farm.test", "--password", "pw"])

    assert len(closed_sessions) == 1


@responses.activate
def test_logout_closes_clients(tmp_path, closed_sessions) -> None:
    FileStore(tmp_path).set(LEGACY_KEY, "cli-token")
    responses.add(responses.POST, f"{API}/api/logout", json={"message": "ok"}, status=200)

    assert main(["logout"]) == 0

    assert len(closed_sessions) == 1


@responses.activate
def test_logout_clears_store(tmp_path) -> None:
    FileStore(tmp_path).set(LEGACY_KEY, "cli-token")
    responses.add(responses.POST, f"{API}/api/logout", json={"message": "ok"}, status=200)

    assert main(["logout"]) == 0

    assert FileStore(tmp_path).get(LEGACY_KEY) is None
    assert responses.calls[0].request.headers["Authorization"] == "Bearer cli-token"


def test_missing_base_url_is_reported(monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    monkeypatch.delenv("FARM_MARKET_API_BASE_URL")

    assert main(["status"]) == 1
    assert "CONFIG_ERROR" in capsys.readouterr().out
