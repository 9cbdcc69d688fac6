from .clients.auth import AuthClient
from .config import ClientConfig, ConfigError, load_config
from .debug import AuthDebugger
from .exceptions import (
    ApiError,
    AuthError,
    ForbiddenError,
    MalformedRecord,
    NotFoundError,
    SessionError,
    StorageUnavailable,
    TransportError,
    UnauthorizedError,
    ValidationError,
    VerificationFailure,
)
from .http_client import HttpClient
from .models import AuthUser, LoginResponse, TokenRecord
from .navigation import HostNavigator, Navigator, build_login_url
from .session import AuthManager, FarmMarketSession, build_session
from .session_guard import SessionGuard
from .storage import FileStore, KeyValueStore, MemoryStore
from .token_manager import LEGACY_KEY, STRUCTURED_KEY, SessionContext, TokenManager
from .tracing import TraceContext
from .verifier import RemoteAuthVerifier

__version__ = "0.3.0"

__all__ = [
    "ApiError",
    "AuthClient",
    "AuthDebugger",
    "AuthError",
    "AuthManager",
    "AuthUser",
    "ClientConfig",
    "ConfigError",
    "FarmMarketSession",
    "FileStore",
    "ForbiddenError",
    "HostNavigator",
    "HttpClient",
    "KeyValueStore",
    "LEGACY_KEY",
    "LoginResponse",
    "MalformedRecord",
    "MemoryStore",
    "Navigator",
    "NotFoundError",
    "RemoteAuthVerifier",
    "STRUCTURED_KEY",
    "SessionContext",
    "SessionError",
    "SessionGuard",
    "StorageUnavailable",
    "TokenManager",
    "TokenRecord",
    "TraceContext",
    "TransportError",
    "UnauthorizedError",
    "ValidationError",
    "VerificationFailure",
    "build_login_url",
    "build_session",
    "load_config",
]
