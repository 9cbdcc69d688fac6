from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .clients.auth import AuthClient
from .config import ClientConfig
from .debug import AuthDebugger
from .exceptions import ApiError
from .http_client import HttpClient
from .logger import get_logger, log_event
from .models import AuthUser
from .navigation import HostNavigator, Navigator, is_auth_path
from .session_guard import SessionGuard
from .storage import FileStore, KeyValueStore
from .token_manager import SessionContext, TokenManager
from .tracing import TraceContext
from .verifier import RemoteAuthVerifier

MODULE = "auth_manager"


@dataclass
class AuthManager:
    """Holds who is logged in for the current process.

    The token itself always lives in the ``TokenManager``; this object only
    caches the user profile and the authenticated flag.
    """

    tokens: TokenManager
    auth: AuthClient
    navigator: Navigator
    user: AuthUser | None = None
    authenticated: bool = False
    loading: bool = False
    initialized: bool = False
    logger: logging.Logger = field(default_factory=lambda: get_logger("farm_market_sdk.auth"))

    def initialize(self, current_path: str | None = None) -> bool:
        if self.initialized:
            return self.authenticated

        path = current_path or self.navigator.current_path()
        if is_auth_path(path):
            return False

        self.loading = True
        self.initialized = True
        try:
            if self.tokens.get():
                self.user = self.auth.get_user()
                self.authenticated = True
                return True
        except ApiError as exc:
            log_event(
                self.logger,
                module=MODULE,
                action="initialize",
                outcome="failed",
                level=logging.WARNING,
                code=exc.code,
                status_code=exc.status_code,
            )
            self._cleanup()
        finally:
            self.loading = False
        return False

    def login(self, email: str, password: str, remember: bool = False) -> bool:
        try:
            response = self.auth.login(email, password, remember)
        except ApiError as exc:
            self._log_failure("login", exc)
            return False
        self.tokens.store(response.token)
        self.user = response.user
        self.authenticated = True
        self.initialized = True
        log_event(self.logger, module=MODULE, action="login", outcome="success", remember=remember)
        return True

    def register(self, name: str, email: str, password: str, password_confirmation: str) -> bool:
        try:
            response = self.auth.register(name, email, password, password_confirmation)
        except ApiError as exc:
            self._log_failure("register", exc)
            return False
        self.tokens.store(response.token)
        self.user = response.user
        self.authenticated = True
        self.initialized = True
        return True

    def logout(self) -> None:
        try:
            if self.authenticated:
                self.auth.logout()
        except ApiError as exc:
            self._log_failure("logout", exc)
        finally:
            self._cleanup()

    def is_authenticated(self) -> bool:
        return self.authenticated

    def is_loading(self) -> bool:
        return self.loading

    def _cleanup(self) -> None:
        self.user = None
        self.authenticated = False
        self.tokens.remove()

    def _log_failure(self, action: str, exc: ApiError) -> None:
        log_event(
            self.logger,
            module=MODULE,
            action=action,
            outcome="failed",
            level=logging.WARNING,
            code=exc.code,
            status_code=exc.status_code,
            trace_id=exc.trace_id,
        )


@dataclass
class FarmMarketSession:
    config: ClientConfig
    tokens: TokenManager
    verifier: RemoteAuthVerifier
    http: HttpClient
    auth_client: AuthClient
    manager: AuthManager
    guard: SessionGuard
    debugger: AuthDebugger

    async def aclose(self) -> None:
        await self.verifier.aclose()
        if self.http.session is not None:
            self.http.session.close()


def build_session(
    config: ClientConfig,
    *,
    store: KeyValueStore | None = None,
    navigator: Navigator | None = None,
    verifier: RemoteAuthVerifier | None = None,
    http: HttpClient | None = None,
) -> FarmMarketSession:
    navigator = navigator or HostNavigator()
    debugger = AuthDebugger(enabled=config.debug_auth)
    trace = TraceContext()
    verifier = verifier or RemoteAuthVerifier.from_config(config, interceptors=[debugger.on_request], trace=trace)
    tokens = TokenManager(
        SessionContext(
            store=store or FileStore(config.store_dir),
            navigator=navigator,
            verifier=verifier,
            default_ttl_hours=config.token_ttl_hours,
            login_path=config.login_path,
        )
    )

    def on_unauthorized(error: ApiError) -> None:
        if is_auth_path(navigator.current_path()):
            return
        tokens.handle_auth_error()

    http = http or HttpClient(config, trace=trace, before_request=debugger.before_request)
    if http.on_unauthorized is None:
        http.on_unauthorized = on_unauthorized
    auth_client = AuthClient(http=http, token_provider=tokens.get)
    manager = AuthManager(tokens=tokens, auth=auth_client, navigator=navigator)
    return FarmMarketSession(
        config=config,
        tokens=tokens,
        verifier=verifier,
        http=http,
        auth_client=auth_client,
        manager=manager,
        guard=SessionGuard(tokens),
        debugger=debugger,
    )
