from sqlalchemy.orm import Session
from typing import Optional, Callable
import logging
import secrets
import string
from ..models.household import Household
from ..models.user import User
from ..models.enums import UserRole
from ..utils.constants import AppConstants
from .membership_service import MembershipService

logger = logging.getLogger(__name__)


# Custom Exceptions for better error handling
class HouseholdServiceError(Exception):
    """Base exception for household service errors"""

    pass


class JoinCodeExhaustedError(HouseholdServiceError):
    """Could not find an unused join code within the retry budget"""

    pass


JOIN_CODE_ALPHABET = string.ascii_uppercase + string.digits


def random_join_code(length: int = AppConstants.JOIN_CODE_LENGTH) -> str:
    return "".join(secrets.choice(JOIN_CODE_ALPHABET) for _ in range(length))


class HouseholdService:
    def __init__(
        self,
        db: Session,
        code_generator: Callable[[], str] = random_join_code,
        max_attempts: int = AppConstants.JOIN_CODE_MAX_ATTEMPTS,
    ):
        self.db = db
        self.code_generator = code_generator
        self.max_attempts = max_attempts
        self.memberships = MembershipService(db)

    def generate_join_code(self) -> str:
        """Return a join code no existing household uses"""
        for attempt in range(1, self.max_attempts + 1):
            code = self.code_generator().upper()
            if not Household.join_code_exists(self.db, code):
                return code
            logger.info(f"Join code collision on attempt {attempt}: {code}")

        raise JoinCodeExhaustedError(
            f"No unique join code after {self.max_attempts} attempts"
        )

    def should_provision(
        self, user: User, role: UserRole, has_invitation: bool
    ) -> bool:
        """Default household only for owners without one and without an invite"""
        return (
            role == UserRole.AMO
            and user.household_id is None
            and not has_invitation
        )

    def provision_default_household(
        self, user: User, role: UserRole, has_invitation: bool = False
    ) -> Optional[Household]:
        """Create the owner's default household and link the user to it.

        Returns None when the user does not qualify. Raises
        JoinCodeExhaustedError when no code could be generated and
        HouseholdServiceError for any store failure; callers turn both into a
        signup warning.
        """
        if not self.should_provision(user, role, has_invitation):
            logger.debug(
                f"Skipping household creation for {user.id} "
                f"(role={role.value}, household={user.household_id}, "
                f"invite={has_invitation})"
            )
            return None

        join_code = self.generate_join_code()

        try:
            household = Household(
                name=AppConstants.DEFAULT_HOUSEHOLD_NAME,
                owner_id=user.id,
                join_code=join_code,
            )
            self.db.add(household)
            self.db.flush()  # Get ID without committing

            user.household_id = household.id
            self.db.commit()
            self.db.refresh(household)

        except Exception as e:
            self.db.rollback()
            raise HouseholdServiceError(f"Failed to create household: {str(e)}")

        self.memberships.ensure_member(household.id, user.id)

        logger.info(
            f"Created household {household.id} ({join_code}) for user {user.id}"
        )
        return household

    def assign_household(
        self,
        user: User,
        household_id: str,
        specific_role: Optional[str] = None,
    ) -> User:
        """Bind the user to an invitation's household as staff"""
        try:
            user.household_id = household_id
            user.role = UserRole.KASAMBAHAY.value
            if specific_role:
                user.specific_role = specific_role
            self.db.commit()
            self.db.refresh(user)
        except Exception as e:
            self.db.rollback()
            raise HouseholdServiceError(f"Failed to assign household: {str(e)}")

        self.memberships.ensure_member(household_id, user.id)
        return user
