# Custom Exceptions for identity and onboarding errors


class IdentityServiceError(Exception):
    """Base exception for identity/onboarding errors"""

    pass


class InputError(IdentityServiceError):
    """Missing or invalid combination of signup fields"""

    pass


class AuthError(IdentityServiceError):
    """Bearer credential missing, invalid or expired"""

    pass


class ConflictError(IdentityServiceError):
    """Contact already owned by a settled identity"""

    def __init__(self, message: str, code: str = "CONFLICT", extra: dict = None):
        super().__init__(message)
        self.code = code
        self.extra = extra or {}


class NotFoundError(IdentityServiceError):
    """Requested user or invitation does not exist"""

    pass


class SecondaryEffectError(IdentityServiceError):
    """Non-fatal failure of a follow-up step (household, membership, invite)"""

    pass


class FatalError(IdentityServiceError):
    """Store or provider unavailable"""

    pass
