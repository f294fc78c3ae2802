"""Thin adapter over the external authentication provider (Supabase Auth)."""
from dataclasses import dataclass, field
from typing import Optional, Dict, Any
import logging

from supabase import Client
from .errors import AuthError, InputError, FatalError
from ..utils.validation import normalize_provider

logger = logging.getLogger(__name__)


@dataclass
class AuthIdentity:
    id: str
    email: Optional[str] = None
    phone: Optional[str] = None
    provider: str = "email"
    metadata: Dict[str, Any] = field(default_factory=dict)


class AuthProvider:
    """Interface the signup flow depends on"""

    def create_user(
        self, email: str, password: str, metadata: Dict[str, Any]
    ) -> AuthIdentity:
        raise NotImplementedError

    def get_user(self, access_token: str) -> AuthIdentity:
        raise NotImplementedError


def identity_from_supabase(supabase_user) -> AuthIdentity:
    """Map a Supabase auth user onto AuthIdentity"""
    user_metadata = getattr(supabase_user, "user_metadata", None) or {}
    app_metadata = getattr(supabase_user, "app_metadata", None) or {}
    provider = (
        user_metadata.get("provider")
        or user_metadata.get("provider_id")
        or app_metadata.get("provider")
    )
    return AuthIdentity(
        id=str(supabase_user.id),
        email=getattr(supabase_user, "email", None) or None,
        phone=getattr(supabase_user, "phone", None) or None,
        provider=normalize_provider(provider),
        metadata=dict(user_metadata),
    )


class SupabaseAuthProvider(AuthProvider):
    def __init__(self, client: Client):
        self.client = client

    def create_user(
        self, email: str, password: str, metadata: Dict[str, Any]
    ) -> AuthIdentity:
        try:
            auth_response = self.client.auth.admin.create_user(
                {
                    "email": email,
                    "password": password,
                    "email_confirm": True,
                    "user_metadata": metadata,
                }
            )
        except Exception as e:
            logger.error(f"Auth user creation error: {e}")
            raise InputError(str(e))

        if not auth_response or not auth_response.user:
            raise FatalError("Failed to create user")

        return identity_from_supabase(auth_response.user)

    def get_user(self, access_token: str) -> AuthIdentity:
        try:
            auth_response = self.client.auth.get_user(access_token)
        except Exception as e:
            logger.error(f"Authentication error: {e}")
            raise AuthError("Could not validate credentials")

        if not auth_response or not auth_response.user:
            raise AuthError("Could not validate credentials")

        return identity_from_supabase(auth_response.user)
