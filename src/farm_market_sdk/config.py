from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Iterable

from dotenv import load_dotenv


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class ClientConfig:
    env_name: str
    api_base_url: str
    verify_path: str = "/api/user"
    login_path: str = "/login"
    token_ttl_hours: float = 12.0
    timeout_seconds: float = 10.0
    retries: int = 2
    retry_backoff_seconds: float = 0.3
    verify_ssl: bool = True
    debug_auth: bool = False
    store_dir: str | None = None

    @property
    def normalized_env(self) -> str:
        return self.env_name.lower().strip()

    @property
    def verify_url(self) -> str:
        return f"{self.api_base_url}/{self.verify_path.lstrip('/')}"


def _require(values: dict[str, str | None], required: Iterable[str]) -> None:
    missing = [key for key in required if not values.get(key)]
    if missing:
        raise ConfigError(f"Missing required config values: {', '.join(missing)}")


def _coerce_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _read_float(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid {name}: expected a number, got {raw!r}") from exc


def _read_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid {name}: expected an integer, got {raw!r}") from exc


def _read_path(name: str, default: str) -> str:
    raw = (os.getenv(name) or default).strip()
    return raw if raw.startswith("/") else f"/{raw}"


def _validate(condition: bool, message: str) -> None:
    if not condition:
        raise ConfigError(message)


def load_config(env_file: str | None = None) -> ClientConfig:
    """Load config from environment with optional .env override."""
    load_dotenv(env_file)

    env_name = (os.getenv("FARM_MARKET_ENV") or "dev").strip()
    env_key = env_name.upper()

    api_base_url = (
        (os.getenv(f"FARM_MARKET_API_BASE_URL_{env_key}") or "").strip()
        or (os.getenv("FARM_MARKET_API_BASE_URL") or "").strip()
    )
    _require({"FARM_MARKET_API_BASE_URL": api_base_url}, ["FARM_MARKET_API_BASE_URL"])

    token_ttl_hours = _read_float("FARM_MARKET_TOKEN_TTL_HOURS", "12")
    _validate(
        token_ttl_hours > 0,
        f"Invalid FARM_MARKET_TOKEN_TTL_HOURS: expected > 0, got {token_ttl_hours}",
    )

    timeout_seconds = _read_float("FARM_MARKET_TIMEOUT_SECONDS", "10")
    _validate(
        timeout_seconds > 0,
        f"Invalid FARM_MARKET_TIMEOUT_SECONDS: expected > 0, got {timeout_seconds}",
    )

    retries = _read_int("FARM_MARKET_RETRIES", "2")
    _validate(retries >= 0, f"Invalid FARM_MARKET_RETRIES: expected >= 0, got {retries}")

    retry_backoff_seconds = _read_float("FARM_MARKET_RETRY_BACKOFF_SECONDS", "0.3")
    _validate(
        retry_backoff_seconds >= 0,
        (
            "Invalid FARM_MARKET_RETRY_BACKOFF_SECONDS: "
            f"expected >= 0, got {retry_backoff_seconds}"
        ),
    )

    store_dir = (os.getenv("FARM_MARKET_STORE_DIR") or "").strip() or None

    return ClientConfig(
        env_name=env_name,
        api_base_url=api_base_url.rstrip("/"),
        verify_path=_read_path("FARM_MARKET_VERIFY_PATH", "/api/user"),
        login_path=_read_path("FARM_MARKET_LOGIN_PATH", "/login"),
        token_ttl_hours=token_ttl_hours,
        timeout_seconds=timeout_seconds,
        retries=retries,
        retry_backoff_seconds=retry_backoff_seconds,
        verify_ssl=_coerce_bool(os.getenv("FARM_MARKET_VERIFY_SSL"), True),
        debug_auth=_coerce_bool(os.getenv("FARM_MARKET_DEBUG_AUTH"), False),
        store_dir=store_dir,
    )
