from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import Optional
from ..database import get_db
from ..dependencies.auth import get_bearer_token, get_auth_provider
from ..schemas.auth import SignupRequest, SignupResponse
from ..services.auth_provider import AuthProvider
from ..services.signup_service import SignupService
from ..utils.router_helpers import handle_service_errors
import logging

router = APIRouter(tags=["authentication"])
logger = logging.getLogger(__name__)


@router.post(
    "/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED
)
@handle_service_errors
async def signup(
    signup_data: SignupRequest,
    bearer_token: Optional[str] = Depends(get_bearer_token),
    db: Session = Depends(get_db),
    auth_provider: AuthProvider = Depends(get_auth_provider),
):
    """Create or link an account.

    Without a bearer token this is a password signup (email or mobile). With
    one, the token's identity is onboarded (OAuth). ``link_existing_user``
    attaches an invitation to an already registered account.
    """
    service = SignupService(db, auth_provider)
    result = service.signup(signup_data, bearer_token=bearer_token)
    if result.warning:
        logger.warning(f"Signup for {result.user_id} finished with: {result.warning}")
    return result.to_response()


@router.post(
    "/oauth-signup",
    response_model=SignupResponse,
    status_code=status.HTTP_201_CREATED,
)
@handle_service_errors
async def oauth_signup(
    signup_data: SignupRequest,
    bearer_token: Optional[str] = Depends(get_bearer_token),
    db: Session = Depends(get_db),
    auth_provider: AuthProvider = Depends(get_auth_provider),
):
    """Onboard the identity behind an OAuth session; the bearer is mandatory"""
    service = SignupService(db, auth_provider)
    result = service.signup(
        signup_data, bearer_token=bearer_token, require_bearer=True
    )
    return result.to_response()
