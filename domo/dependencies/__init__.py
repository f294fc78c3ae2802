# domo/dependencies/__init__.py

from .auth import get_bearer_token, get_auth_provider

__all__ = [
    "get_bearer_token",
    "get_auth_provider",
]
