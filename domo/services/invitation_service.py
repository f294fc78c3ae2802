"""Invitation ledger: validate and consume single-use staff invites.

Validation is read-only so a failed downstream step never burns an unused
invite. Consumption is a conditional UPDATE gated on ``status = 'new'``; a
zero-row result means another caller already consumed the grant and is
reported as ``ALREADY_CONSUMED`` instead of raising.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Dict, Any
import logging
import uuid

from sqlalchemy.orm import Session
from sqlalchemy import and_, or_, func
from ..models.staff_invite import StaffInvite
from ..models.enums import InviteStatus
from ..utils.validation import normalize_mobile, normalize_email

logger = logging.getLogger(__name__)


class LedgerOutcome(str, Enum):
    OK = "ok"
    ALREADY_CONSUMED = "already_consumed"
    NOT_FOUND = "not_found"


@dataclass
class LedgerResult:
    outcome: LedgerOutcome
    grant: Optional[StaffInvite] = None

    @property
    def ok(self) -> bool:
        return self.outcome == LedgerOutcome.OK

    def to_remote(self) -> Dict[str, Any]:
        """Remote contract: {success, data?, error?}"""
        if self.ok:
            return {"success": True, "data": self.grant.to_dict()}
        if self.outcome == LedgerOutcome.ALREADY_CONSUMED:
            return {
                "success": False,
                "error": "Invite token has already been used",
                "data": self.grant.to_dict() if self.grant is not None else None,
            }
        return {"success": False, "error": "Invite token not found"}


def _parse_token(token) -> Optional[str]:
    if not token or not isinstance(token, str):
        return None
    try:
        return str(uuid.UUID(token.strip()))
    except ValueError:
        return None


class InvitationService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_token(self, token: str) -> Optional[StaffInvite]:
        parsed = _parse_token(token)
        if parsed is None:
            return None
        return self.db.query(StaffInvite).filter(StaffInvite.token == parsed).first()

    def validate(self, token: str) -> LedgerResult:
        """Read-only lookup; safe to call speculatively"""
        grant = self.get_by_token(token)
        if grant is None:
            return LedgerResult(LedgerOutcome.NOT_FOUND)
        if grant.status != InviteStatus.NEW.value:
            return LedgerResult(LedgerOutcome.ALREADY_CONSUMED, grant)
        return LedgerResult(LedgerOutcome.OK, grant)

    def consume(self, token: str) -> LedgerResult:
        """Flip new -> done for the grant addressed by token"""
        parsed = _parse_token(token)
        if parsed is None:
            return LedgerResult(LedgerOutcome.NOT_FOUND)
        return self._transition(StaffInvite.token == parsed)

    def claim(self, grant_id: int) -> LedgerResult:
        """Flip new -> done for a grant found by contact lookup"""
        return self._transition(StaffInvite.id == grant_id)

    def _transition(self, selector) -> LedgerResult:
        updated = (
            self.db.query(StaffInvite)
            .filter(and_(selector, StaffInvite.status == InviteStatus.NEW.value))
            .update(
                {"status": InviteStatus.DONE.value, "updated_at": func.now()},
                synchronize_session=False,
            )
        )
        self.db.commit()

        grant = self.db.query(StaffInvite).filter(selector).first()
        if grant is not None:
            self.db.refresh(grant)

        if updated == 1:
            logger.info(f"Invite {grant.id} consumed")
            return LedgerResult(LedgerOutcome.OK, grant)
        if grant is None:
            return LedgerResult(LedgerOutcome.NOT_FOUND)

        logger.info(f"Invite {grant.id} already consumed by another caller")
        return LedgerResult(LedgerOutcome.ALREADY_CONSUMED, grant)

    def stamp_user(self, grant_id: int, user_id: str) -> bool:
        """Record the consuming canonical user unless one is already recorded.

        A grant issued against a pending user keeps that id until the merge
        has re-pointed it; the FK migration moves it to the canonical id.
        """
        updated = (
            self.db.query(StaffInvite)
            .filter(and_(StaffInvite.id == grant_id, StaffInvite.user_id.is_(None)))
            .update(
                {"user_id": user_id, "updated_at": func.now()},
                synchronize_session=False,
            )
        )
        self.db.commit()
        return updated == 1

    def find_by_contact(
        self, mobile: Optional[str], email: Optional[str]
    ) -> Optional[StaffInvite]:
        """Newest open grant for the contact, mobile first then email.

        Stored contacts may predate normalization, so both the normalized and
        the raw value are matched.
        """
        normalized_mobile = normalize_mobile(mobile)
        if normalized_mobile:
            candidates = {normalized_mobile}
            if isinstance(mobile, str) and mobile.strip():
                candidates.add(mobile.strip())
            grant = self._newest_open(StaffInvite.mobile.in_(candidates))
            if grant is None:
                grant = self._match_unnormalized_mobile(normalized_mobile)
            if grant is not None:
                return grant

        normalized_email = normalize_email(email)
        if normalized_email:
            return self._newest_open(
                or_(
                    func.lower(func.trim(StaffInvite.email)) == normalized_email,
                    StaffInvite.email == email,
                )
            )
        return None

    def _newest_open(self, condition) -> Optional[StaffInvite]:
        return (
            self.db.query(StaffInvite)
            .filter(and_(condition, StaffInvite.status == InviteStatus.NEW.value))
            .order_by(StaffInvite.created_at.desc(), StaffInvite.id.desc())
            .first()
        )

    def _match_unnormalized_mobile(self, normalized_mobile: str):
        # Legacy rows store local formats such as "0917 123 4567"
        open_grants = (
            self.db.query(StaffInvite)
            .filter(
                and_(
                    StaffInvite.status == InviteStatus.NEW.value,
                    StaffInvite.mobile.isnot(None),
                )
            )
            .order_by(StaffInvite.created_at.desc(), StaffInvite.id.desc())
            .all()
        )
        return next(
            (g for g in open_grants if normalize_mobile(g.mobile) == normalized_mobile),
            None,
        )
