import re
from typing import Optional, Tuple
from .constants import AppConstants
from ..models.enums import AuthMethod, KNOWN_AUTH_PROVIDERS

_SEPARATORS = re.compile(r"[\s-]")
_DOMESTIC_MOBILE = re.compile(r"^0\d{10}$")
_PROVIDER_PATTERN = re.compile(r"^[a-z0-9_-]+$")


def normalize_mobile(raw) -> Optional[str]:
    """Canonical mobile number used for matching and uniqueness.

    Strips whitespace and hyphens, rewrites a leading ``00`` to ``+`` and an
    11-digit domestic number starting with ``0`` to the ``+63`` form. Anything
    else passes through unchanged. Never raises.
    """
    if raw is None or not isinstance(raw, str):
        return None

    value = _SEPARATORS.sub("", raw.strip())
    if not value:
        return None

    if value.startswith("00"):
        value = f"+{value[2:]}"

    if _DOMESTIC_MOBILE.match(value):
        value = f"{AppConstants.DEFAULT_COUNTRY_CODE}{value[1:]}"

    return value or None


def normalize_email(raw) -> Optional[str]:
    """Trim and lowercase; empty input becomes None"""
    if raw is None or not isinstance(raw, str):
        return None
    return raw.strip().lower() or None


def normalize_provider(raw) -> str:
    """Reduce an auth provider identifier to a short stable name"""
    if not raw or not isinstance(raw, str):
        return AuthMethod.EMAIL.value

    provider = raw.strip().lower()
    if "-" in provider:
        # "google-oauth2" -> "google"
        provider = provider.split("-", 1)[0]

    if not provider:
        return AuthMethod.EMAIL.value
    if provider in KNOWN_AUTH_PROVIDERS:
        return provider
    if len(provider) > AppConstants.MAX_AUTH_METHOD_LENGTH:
        return AuthMethod.OAUTH.value
    if not _PROVIDER_PATTERN.match(provider):
        return AuthMethod.OAUTH.value
    return provider


def primary_auth_method(mobile: Optional[str], provider: str) -> str:
    """Phone takes precedence over the provider"""
    return AuthMethod.PHONE.value if mobile else provider


def split_display_name(name: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """First word and the remainder of a display name"""
    if not name or not name.strip():
        return None, None
    parts = name.strip().split(" ", 1)
    first = parts[0]
    last = parts[1].strip() if len(parts) > 1 else None
    return first, (last or None)


def placeholder_auth_email(mobile: Optional[str]) -> str:
    """Auth email for signups that only supplied a mobile number"""
    digits = re.sub(r"\D", "", mobile or "")
    if not digits:
        return AppConstants.FALLBACK_AUTH_EMAIL
    return f"{digits}@{AppConstants.PLACEHOLDER_EMAIL_DOMAIN}"


def temp_migration_email(user_id: str) -> str:
    return f"temp-{user_id}@{AppConstants.TEMP_MIGRATION_EMAIL_DOMAIN}"


def first_non_empty(*values):
    for value in values:
        if isinstance(value, str):
            if value.strip():
                return value
        elif value is not None:
            return value
    return None


class ValidationHelpers:
    @staticmethod
    def validate_phone(phone: str) -> bool:
        """Validate phone number format (flexible)"""
        if not phone:
            return True  # Optional field

        # Remove all non-numeric characters
        digits_only = re.sub(r"\D", "", phone)

        # Check if it's a reasonable length (7-15 digits)
        return 7 <= len(digits_only) <= 15

    @staticmethod
    def validate_password(password: Optional[str]) -> bool:
        return bool(password) and len(password) >= AppConstants.MIN_PASSWORD_LENGTH
