from __future__ import annotations

from dataclasses import replace

import pytest
import responses

from farm_market_sdk.navigation import HostNavigator
from farm_market_sdk.session import build_session
from farm_market_sdk.storage import MemoryStore
from farm_market_sdk.token_manager import LEGACY_KEY, STRUCTURED_KEY

API = "https://api.farm.test"
USER = {"id": 3, "name": "Ada", "email": "ada@farm.test"}


@pytest.fixture
def session(config, verifier):
    return build_session(
        config,
        store=MemoryStore(),
        navigator=HostNavigator(location="/dashboard"),
        verifier=verifier,
    )


@responses.activate
def test_login_stores_token_and_user(session) -> None:
    responses.add(responses.POST, f"{API}/api/login", json={"token": "tok", "user": USER}, status=200)

    assert session.manager.login("ada@farm.test", "pw") is True

    assert session.tokens.get() == "tok"
    assert session.manager.is_authenticated()
    assert session.manager.user is not None and session.manager.user.email == "ada@farm.test"


@responses.activate
def test_login_failure_returns_false(session) -> None:
    responses.add(responses.POST, f"{API}/api/login", json={"message": "bad credentials"}, status=422)

    assert session.manager.login("ada@farm.test", "wrong") is False

    assert session.tokens.get() is None
    assert not session.manager.is_authenticated()


@responses.activate
def test_rejected_login_keeps_existing_session(session) -> None:
    session.tokens.store("good-token", 1)
    responses.add(responses.POST, f"{API}/api/login", json={"message": "Invalid credentials"}, status=401)

    assert session.manager.login("ada@farm.test", "typo") is False

    assert session.tokens.get() == "good-token"
    assert session.tokens.context.navigator.history == []


@responses.activate
def test_rejected_register_keeps_existing_session(session) -> None:
    session.tokens.store("good-token", 1)
    responses.add(responses.POST, f"{API}/api/register", json={"message": "Unauthenticated."}, status=401)

    assert session.manager.register("Ada", "ada@farm.test", "pw", "pw") is False

    assert session.tokens.get() == "good-token"
    assert session.tokens.context.navigator.history == []


@responses.activate
def test_register_stores_token(session) -> None:
    responses.add(responses.POST, f"{API}/api/register", json={"token": "new-tok", "user": USER}, status=201)

    assert session.manager.register("Ada", "ada@farm.test", "pw", "pw") is True
    assert session.tokens.get() == "new-tok"


@responses.activate
def test_initialize_loads_user_when_token_present(session) -> None:
    session.tokens.store("tok", 1)
    responses.add(responses.GET, f"{API}/api/user", json=USER, status=200)

    assert session.manager.initialize() is True
    assert session.manager.user is not None and session.manager.user.id == 3
    assert responses.calls[0].request.headers["Authorization"] == "Bearer tok"

    assert session.manager.initialize() is True
    assert len(responses.calls) == 1


def test_initialize_without_token(session) -> None:
    assert session.manager.initialize() is False
    assert session.manager.is_loading() is False


def test_initialize_skipped_on_auth_pages(session) -> None:
    session.tokens.store("tok", 1)

    assert session.manager.initialize("/login") is False
    assert session.manager.initialized is False


@responses.activate
def test_unauthorized_response_evicts_token_and_redirects(session) -> None:
    session.tokens.store("stale", 1)
    responses.add(responses.GET, f"{API}/api/user", json={"message": "Unauthenticated."}, status=401)

    assert session.manager.initialize() is False

    assert session.tokens.get() is None
    assert session.tokens.context.navigator.history == ["/login?redirect=%2Fdashboard"]


@responses.activate
def test_unauthorized_on_auth_page_does_not_redirect(config, verifier) -> None:
    navigator = HostNavigator(location="/login")
    session = build_session(config, store=MemoryStore(), navigator=navigator, verifier=verifier)
    responses.add(responses.POST, f"{API}/api/login", json={"message": "Invalid credentials"}, status=401)

    assert session.manager.login("ada@farm.test", "wrong") is False
    assert navigator.history == []


@responses.activate
def test_logout_calls_api_and_clears(session) -> None:
    responses.add(responses.POST, f"{API}/api/login", json={"token": "tok", "user": USER}, status=200)
    responses.add(responses.POST, f"{API}/api/logout", json={"message": "ok"}, status=200)
    session.manager.login("ada@farm.test", "pw")

    session.manager.logout()

    assert responses.calls[1].request.headers["Authorization"] == "Bearer tok"
    assert session.tokens.get() is None
    assert session.manager.user is None


@responses.activate
def test_logout_clears_even_when_api_fails(session) -> None:
    store = session.tokens.context.store
    responses.add(responses.POST, f"{API}/api/login", json={"token": "tok", "user": USER}, status=200)
    responses.add(responses.POST, f"{API}/api/logout", json={"message": "boom"}, status=500)
    session.manager.login("ada@farm.test", "pw")

    session.manager.logout()

    assert store.get(LEGACY_KEY) is None
    assert store.get(STRUCTURED_KEY) is None
    assert not session.manager.is_authenticated()


def test_logout_when_not_authenticated_skips_api(session) -> None:
    session.tokens.store("tok", 1)

    session.manager.logout()

    assert session.tokens.get() is None


def test_build_session_honours_debug_flag(config, verifier) -> None:
    session = build_session(replace(config, debug_auth=True), store=MemoryStore(), verifier=verifier)

    assert session.debugger.enabled is True
    assert session.http.before_request == session.debugger.before_request
