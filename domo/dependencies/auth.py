from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
import logging
from ..database import get_supabase_admin
from ..services.auth_provider import AuthProvider, SupabaseAuthProvider

# Signup accepts callers with or without a credential
security = HTTPBearer(auto_error=False)
logger = logging.getLogger(__name__)


async def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[str]:
    if credentials is None or not credentials.credentials:
        return None
    return credentials.credentials


def get_auth_provider() -> AuthProvider:
    """Supabase admin client wrapped for the signup flows"""
    try:
        return SupabaseAuthProvider(get_supabase_admin())
    except RuntimeError as e:
        logger.error(f"Auth provider unavailable: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Authentication provider not configured",
        )
