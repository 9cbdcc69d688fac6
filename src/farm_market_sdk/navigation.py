from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol
from urllib.parse import quote

AUTH_PATHS = frozenset({"/login", "/register", "/forgot-password"})


class Navigator(Protocol):
    def current_path(self) -> str: ...

    def navigate(self, url: str) -> None: ...


def build_login_url(return_path: str, login_path: str = "/login") -> str:
    return f"{login_path}?redirect={quote(return_path, safe='')}"


def is_auth_path(path: str) -> bool:
    return path.split("?", 1)[0] in AUTH_PATHS


@dataclass
class HostNavigator:
    """In-process location holder for headless hosts and tests.

    ``navigate`` records every target and moves ``location`` to it.
    """

    location: str = "/"
    history: list[str] = field(default_factory=list)

    def current_path(self) -> str:
        return self.location.split("?", 1)[0]

    def navigate(self, url: str) -> None:
        self.history.append(url)
        self.location = url
