"""Merge a pending placeholder user into the canonical user of a signup.

The merge never raises. It returns either a MergeOutcome or a
MergeDegradation, and on degradation the caller continues with plain creation
through ``upsert_canonical``.

Steps, in order:
  1. snapshot the placeholder's email/mobile
  2. clear the placeholder's unique keys (gated on it still being claimable)
  3. upsert the canonical row, inheriting placeholder defaults
  4. re-point every foreign key from the placeholder id to the canonical id
  5. commit, then delete the placeholder with the same claimable predicate
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, Union, Iterator, Tuple
import logging

from sqlalchemy.orm import Session
from sqlalchemy import Table, Column, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from ..database import Base
from ..models.user import User
from ..models.user_color import UserColor
from ..models.household_membership import HouseholdMembership
from ..models.enums import UserRole
from ..utils.validation import (
    normalize_email,
    normalize_mobile,
    first_non_empty,
    temp_migration_email,
)
from .errors import SecondaryEffectError

logger = logging.getLogger(__name__)


@dataclass
class CanonicalDraft:
    """Values the signup wants on the canonical row"""

    identity_id: str
    role: UserRole = UserRole.AMO
    email: Optional[str] = None
    mobile_no: Optional[str] = None
    full_name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    nick_name: Optional[str] = None
    specific_role: Optional[str] = None
    household_id: Optional[str] = None
    user_color: Optional[str] = None
    profile_picture: Optional[str] = None
    primary_auth_method: Optional[str] = None
    oauth_linked: bool = False


@dataclass
class PendingSnapshot:
    id: str
    email: Optional[str]
    mobile_no: Optional[str]
    full_name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    nick_name: Optional[str] = None
    household_id: Optional[str] = None
    user_color: Optional[str] = None

    @classmethod
    def of(cls, pending: User) -> "PendingSnapshot":
        return cls(
            id=pending.id,
            email=pending.email,
            mobile_no=pending.mobile_no,
            full_name=pending.full_name,
            first_name=pending.first_name,
            last_name=pending.last_name,
            nick_name=pending.nick_name,
            household_id=pending.household_id,
            user_color=pending.user_color,
        )


@dataclass
class MigrationReport:
    success: bool = True
    moved: Dict[str, int] = field(default_factory=dict)
    dropped_memberships: int = 0
    error: Optional[str] = None

    @property
    def total_moved(self) -> int:
        return sum(self.moved.values())


class DegradationReason(str, Enum):
    RACE_LOST = "race_lost"
    FAILED = "failed"


@dataclass
class MergeOutcome:
    user: User
    pending_id: str
    migration: MigrationReport


@dataclass
class MergeDegradation:
    reason: DegradationReason
    pending_id: str
    detail: Optional[str] = None


MergeResult = Union[MergeOutcome, MergeDegradation]


def user_references(metadata=Base.metadata) -> Iterator[Tuple[Table, Column]]:
    """Every (table, column) pair with a foreign key to users.id"""
    for table in metadata.tables.values():
        for fk in table.foreign_keys:
            if fk.column.table.name == User.__tablename__ and fk.column.name == "id":
                yield table, fk.parent


class ReconciliationService:
    def __init__(self, db: Session):
        self.db = db

    def merge(self, pending: User, draft: CanonicalDraft) -> MergeResult:
        snapshot = PendingSnapshot.of(pending)
        canonical_email = draft.email or normalize_email(snapshot.email)

        try:
            # Clear the keys the canonical row is about to take
            changes = {"mobile_no": None}
            if snapshot.email and normalize_email(snapshot.email) == canonical_email:
                changes["email"] = temp_migration_email(snapshot.id)

            claimed = (
                self.db.query(User)
                .filter(*User.pending_predicate(snapshot.id))
                .update(changes, synchronize_session=False)
            )
            if claimed == 0:
                self.db.rollback()
                logger.info(f"Pending user {snapshot.id} already claimed")
                return MergeDegradation(DegradationReason.RACE_LOST, snapshot.id)

            user = self._write_canonical(draft, snapshot)

            report = self.migrate_foreign_keys(snapshot.id, user.id)
            if not report.success:
                raise SecondaryEffectError(f"FK migration failed: {report.error}")

            # Canonical row and migrated references are durable before the delete
            self.db.commit()

            deleted = (
                self.db.query(User)
                .filter(*User.pending_predicate(snapshot.id))
                .delete(synchronize_session=False)
            )
            self.db.commit()
            self.db.expire_all()

            if deleted == 0:
                logger.info(
                    f"Pending user {snapshot.id} deleted by a concurrent signup"
                )
                return MergeDegradation(DegradationReason.RACE_LOST, snapshot.id)

            user = self.db.query(User).filter(User.id == draft.identity_id).one()
            logger.info(
                f"Merged pending user {snapshot.id} into {user.id} "
                f"({report.total_moved} references moved)"
            )
            return MergeOutcome(user=user, pending_id=snapshot.id, migration=report)

        except Exception as e:
            self.db.rollback()
            self._restore_snapshot(snapshot)
            logger.warning(
                f"Pending user merge failed for {snapshot.id}: {e}; "
                "continuing with normal user creation"
            )
            return MergeDegradation(DegradationReason.FAILED, snapshot.id, str(e))

    def upsert_canonical(self, draft: CanonicalDraft) -> User:
        """Plain creation path: insert or update the canonical row and commit"""
        try:
            user = self._write_canonical(draft)
            self.db.commit()
        except IntegrityError:
            # Created concurrently for the same identity: update it instead
            self.db.rollback()
            if self._find(draft.identity_id) is None:
                raise
            user = self._write_canonical(draft)
            self.db.commit()

        self.db.refresh(user)
        return user

    def migrate_foreign_keys(self, old_user_id: str, new_user_id: str) -> MigrationReport:
        """Re-point every reference to old_user_id at new_user_id.

        Idempotent: a second call finds nothing left to move. Memberships the
        canonical user already holds are dropped instead of duplicated.
        """
        report = MigrationReport()
        if old_user_id == new_user_id:
            return report

        try:
            already_member = select(HouseholdMembership.household_id).where(
                HouseholdMembership.user_id == new_user_id
            )
            report.dropped_memberships = (
                self.db.query(HouseholdMembership)
                .filter(
                    HouseholdMembership.user_id == old_user_id,
                    HouseholdMembership.household_id.in_(already_member),
                )
                .delete(synchronize_session=False)
            )

            for table, column in user_references():
                result = self.db.execute(
                    table.update()
                    .where(column == old_user_id)
                    .values({column.name: new_user_id})
                )
                if result.rowcount:
                    report.moved[f"{table.name}.{column.name}"] = result.rowcount

        except SQLAlchemyError as e:
            report.success = False
            report.error = str(e)

        return report

    # === PRIVATE HELPER METHODS ===

    def _find(self, user_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def _write_canonical(
        self, draft: CanonicalDraft, snapshot: Optional[PendingSnapshot] = None
    ) -> User:
        """Insert or update the canonical row without committing"""
        inherited = snapshot or PendingSnapshot(id="", email=None, mobile_no=None)

        values = {
            "email": first_non_empty(draft.email, normalize_email(inherited.email)),
            "mobile_no": first_non_empty(
                draft.mobile_no, normalize_mobile(inherited.mobile_no)
            ),
            "full_name": first_non_empty(draft.full_name, inherited.full_name),
            "first_name": first_non_empty(draft.first_name, inherited.first_name),
            "last_name": first_non_empty(draft.last_name, inherited.last_name),
            "nick_name": first_non_empty(draft.nick_name, inherited.nick_name),
            "household_id": first_non_empty(
                draft.household_id, inherited.household_id
            ),
            "user_color": first_non_empty(draft.user_color, inherited.user_color),
            "profile_picture": draft.profile_picture,
            "specific_role": draft.specific_role,
            "primary_auth_method": draft.primary_auth_method,
        }

        user = self._find(draft.identity_id)
        if user is None:
            user = User(
                id=draft.identity_id,
                authid=draft.identity_id,
                role=draft.role.value,
                oauth_linked=draft.oauth_linked,
                onboarded=False,
                is_pending_signup=False,
                **values,
            )
            if not user.user_color:
                user.user_color = UserColor.pick_random(self.db)
            self.db.add(user)
        else:
            # Existing canonical row keeps what the draft leaves empty
            for name, value in values.items():
                if value is not None:
                    setattr(user, name, value)
            user.authid = draft.identity_id
            user.role = draft.role.value
            user.oauth_linked = bool(user.oauth_linked or draft.oauth_linked)
            user.is_pending_signup = False
            if not user.user_color:
                user.user_color = UserColor.pick_random(self.db)

        self.db.flush()
        return user

    def _restore_snapshot(self, snapshot: PendingSnapshot) -> None:
        """Best-effort: put the placeholder's keys back after a failed merge"""
        try:
            self.db.query(User).filter(*User.pending_predicate(snapshot.id)).update(
                {"email": snapshot.email, "mobile_no": snapshot.mobile_no},
                synchronize_session=False,
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.warning(f"Could not restore pending user {snapshot.id}: {e}")
