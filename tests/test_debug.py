from __future__ import annotations

import logging

import pytest

from farm_market_sdk.debug import AuthDebugger


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://api.farm.test/api/login", True),
        ("https://api.farm.test/api/user", True),
        ("https://api.farm.test/api/logout", True),
        ("https://api.farm.test/api/crops", False),
    ],
)
def test_is_auth_request(url: str, expected: bool) -> None:
    assert AuthDebugger.is_auth_request(url) is expected


def test_log_is_silent_until_enabled(caplog) -> None:
    debugger = AuthDebugger()

    with caplog.at_level(logging.INFO, logger="farm_market_sdk.auth_debug"):
        debugger.log("checking session")
        assert caplog.records == []

        debugger.enable()
        debugger.log("checking session", {"path": "/farms", "access_token": "abc"})

    assert "[AUTH] checking session" in caplog.text
    assert "abc" not in caplog.text


def test_before_request_only_logs_auth_urls(caplog) -> None:
    debugger = AuthDebugger(enabled=True)

    with caplog.at_level(logging.INFO, logger="farm_market_sdk.auth_debug"):
        debugger.before_request("GET", "https://api.farm.test/api/crops", {"headers": {}})
        debugger.before_request(
            "POST",
            "https://api.farm.test/api/logout",
            {"headers": {"Authorization": "Bearer secret"}},
        )

    assert "/api/crops" not in caplog.text
    assert "[FETCH] POST https://api.farm.test/api/logout" in caplog.text
    assert "secret" not in caplog.text


def test_disable_stops_logging(caplog) -> None:
    debugger = AuthDebugger(enabled=True)
    debugger.disable()

    with caplog.at_level(logging.INFO, logger="farm_market_sdk.auth_debug"):
        debugger.log("hidden")

    assert "hidden" not in caplog.text
