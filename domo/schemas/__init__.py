from .auth import SignupRequest, SignupResponse
from .invitation import InviteTokenRequest, InviteData, InviteTokenResponse
from .mobile import (
    MobileNumberRequest,
    MobileValidationResponse,
    VerificationCodeResponse,
)

__all__ = [
    "SignupRequest",
    "SignupResponse",
    "InviteTokenRequest",
    "InviteData",
    "InviteTokenResponse",
    "MobileNumberRequest",
    "MobileValidationResponse",
    "VerificationCodeResponse",
]
