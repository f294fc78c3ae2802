from enum import Enum


class UserRole(str, Enum):
    AMO = "amo"
    KASAMBAHAY = "kasambahay"


class InviteStatus(str, Enum):
    NEW = "new"
    DONE = "done"


class AuthMethod(str, Enum):
    EMAIL = "email"
    PHONE = "phone"
    OAUTH = "oauth"


class SignupOutcome(str, Enum):
    CREATED = "created"
    LINKED = "linked"


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    OVERDUE = "overdue"


# Providers accepted as-is by normalize_provider
KNOWN_AUTH_PROVIDERS = (
    "email",
    "phone",
    "google",
    "apple",
    "facebook",
    "github",
    "twitter",
    "discord",
    "azure",
    "bitbucket",
    "gitlab",
    "keycloak",
    "linkedin",
    "notion",
    "twitch",
    "slack",
    "spotify",
    "workos",
    "zoom",
)
