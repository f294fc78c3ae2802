# domo/services/__init__.py

from .errors import (
    IdentityServiceError,
    InputError,
    AuthError,
    ConflictError,
    NotFoundError,
    FatalError,
)
from .auth_provider import AuthProvider, AuthIdentity, SupabaseAuthProvider
from .invitation_service import InvitationService, LedgerOutcome, LedgerResult
from .identity_service import IdentityResolver
from .reconciliation_service import ReconciliationService
from .household_service import HouseholdService, HouseholdServiceError
from .membership_service import MembershipService
from .signup_service import SignupService, SignupResult
from .verification_service import VerificationService

__all__ = [
    "IdentityServiceError",
    "InputError",
    "AuthError",
    "ConflictError",
    "NotFoundError",
    "FatalError",
    "AuthProvider",
    "AuthIdentity",
    "SupabaseAuthProvider",
    "InvitationService",
    "LedgerOutcome",
    "LedgerResult",
    "IdentityResolver",
    "ReconciliationService",
    "HouseholdService",
    "HouseholdServiceError",
    "MembershipService",
    "SignupService",
    "SignupResult",
    "VerificationService",
]
