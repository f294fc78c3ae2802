class ResponseMessages:
    """Standard API response messages"""

    SIGNUP_CREATED = "Account created successfully. Welcome!"
    SIGNUP_CREATED_STAFF = "Account created successfully. Welcome, kasambahay!"
    SIGNUP_LINKED = "Invitation linked to your existing account."
    PROFILE_INCOMPLETE = (
        "User created but profile setup incomplete. Please contact support."
    )
    HOUSEHOLD_INCOMPLETE = (
        "Account created but the household could not be set up automatically."
    )
    MOBILE_AVAILABLE = "Mobile number is available"
    MOBILE_ALREADY_OWNED = "May nagmamay-ari na ng mobile number na ito, gumamit ng iba"
    OTP_REQUESTED = "OTP sent successfully"


# Application Constants
class AppConstants:
    # Normalization
    DEFAULT_COUNTRY_CODE = "+63"
    PLACEHOLDER_EMAIL_DOMAIN = "domo.ph"
    FALLBACK_AUTH_EMAIL = "noreply@domo.ph"
    TEMP_MIGRATION_EMAIL_DOMAIN = "temp-migration.domo.ph"
    MAX_AUTH_METHOD_LENGTH = 20

    # Validation Limits
    MIN_PASSWORD_LENGTH = 6
    MAX_NAME_LENGTH = 100

    # Households
    DEFAULT_HOUSEHOLD_NAME = "My Domo household"
    JOIN_CODE_LENGTH = 6
    JOIN_CODE_MAX_ATTEMPTS = 10

    # Colors
    DEFAULT_USER_COLOR = "#FF5733"
    DEFAULT_COLOR_PALETTE = [
        "#FF5733",
        "#33B5FF",
        "#8E44AD",
        "#27AE60",
        "#F39C12",
        "#E91E63",
        "#00BCD4",
        "#795548",
    ]
