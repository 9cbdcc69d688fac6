from .auth import AuthClient
from .base import BaseClient

__all__ = ["AuthClient", "BaseClient"]
