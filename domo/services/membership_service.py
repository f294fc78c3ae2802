from sqlalchemy.orm import Session
from sqlalchemy import and_
from sqlalchemy.exc import IntegrityError
from ..models.household_membership import HouseholdMembership
import logging

logger = logging.getLogger(__name__)


class MembershipService:
    """Idempotent household membership linkage"""

    def __init__(self, db: Session):
        self.db = db

    def is_member(self, household_id: str, user_id: str) -> bool:
        return (
            self.db.query(HouseholdMembership.id)
            .filter(
                and_(
                    HouseholdMembership.household_id == household_id,
                    HouseholdMembership.user_id == user_id,
                )
            )
            .first()
            is not None
        )

    def ensure_member(self, household_id: str, user_id: str) -> bool:
        """Create the membership row if absent.

        Returns True when a row was inserted, False when it already existed
        (including when a concurrent caller inserted it first).
        """
        if self.is_member(household_id, user_id):
            return False

        try:
            self.db.add(
                HouseholdMembership(household_id=household_id, user_id=user_id)
            )
            self.db.commit()
            return True
        except IntegrityError:
            # Unique index hit: someone else linked the pair first
            self.db.rollback()
            logger.info(
                f"Membership ({household_id}, {user_id}) inserted concurrently"
            )
            return False
