"""Signup classification and lookups shared by every signup flow."""
from dataclasses import dataclass
from typing import Optional, Union, List
import logging

from sqlalchemy.orm import Session
from sqlalchemy import and_, or_, func
from ..models.user import User
from ..models.staff_invite import StaffInvite
from ..schemas.auth import SignupRequest
from ..utils.validation import (
    normalize_mobile,
    normalize_email,
    first_non_empty,
    ValidationHelpers,
)
from ..utils.constants import AppConstants
from .auth_provider import AuthProvider, AuthIdentity
from .invitation_service import InvitationService
from .errors import InputError, AuthError

logger = logging.getLogger(__name__)


@dataclass
class ContactKeys:
    """Raw and normalized contact values of one signup request"""

    email: Optional[str] = None
    mobile: Optional[str] = None
    raw_email: Optional[str] = None
    raw_mobile: Optional[str] = None

    @classmethod
    def build(cls, email, mobile) -> "ContactKeys":
        return cls(
            email=normalize_email(email),
            mobile=normalize_mobile(mobile),
            raw_email=email,
            raw_mobile=mobile,
        )

    @property
    def is_empty(self) -> bool:
        return not self.email and not self.mobile


# Signup flows (tagged union)
@dataclass
class PasswordSignup:
    request: SignupRequest
    contact: ContactKeys


@dataclass
class OAuthSignup:
    request: SignupRequest
    contact: ContactKeys
    identity: AuthIdentity


@dataclass
class LinkExistingUser:
    request: SignupRequest
    contact: ContactKeys
    identity: Optional[AuthIdentity] = None


SignupFlow = Union[PasswordSignup, OAuthSignup, LinkExistingUser]


@dataclass
class InvitationMatch:
    grant: StaffInvite
    via_token: bool


@dataclass
class PendingMatch:
    user: Optional[User] = None
    candidates: int = 0
    matched_by: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.user is not None

    @property
    def ambiguous(self) -> bool:
        return self.candidates > 1


class IdentityResolver:
    def __init__(
        self,
        db: Session,
        auth_provider: Optional[AuthProvider] = None,
        invitations: Optional[InvitationService] = None,
    ):
        self.db = db
        self.auth_provider = auth_provider
        self.invitations = invitations or InvitationService(db)

    # === CLASSIFICATION ===

    def classify(
        self,
        request: SignupRequest,
        bearer_token: Optional[str] = None,
        require_bearer: bool = False,
    ) -> SignupFlow:
        """Pick the signup flow; first match wins.

        link_existing_user -> LinkExistingUser, bearer credential -> OAuthSignup,
        otherwise PasswordSignup.
        """
        if require_bearer and not bearer_token:
            raise AuthError("Missing authorization header")

        if request.link_existing_user:
            identity = self._resolve_bearer(bearer_token) if bearer_token else None
            contact = self._contact_for(request, identity)
            if contact.is_empty:
                raise InputError("Either mobile number or email is required")
            return LinkExistingUser(request=request, contact=contact, identity=identity)

        if bearer_token:
            identity = self._resolve_bearer(bearer_token)
            return OAuthSignup(
                request=request,
                contact=self._contact_for(request, identity),
                identity=identity,
            )

        if not request.password or not request.full_name:
            raise InputError(
                "Missing required fields: password and full_name are required"
            )
        contact = ContactKeys.build(request.email, request.mobile_number)
        if contact.is_empty:
            raise InputError("Either mobile number or email is required")
        if not ValidationHelpers.validate_password(request.password):
            raise InputError(
                f"Password must be at least {AppConstants.MIN_PASSWORD_LENGTH} "
                "characters long"
            )
        return PasswordSignup(request=request, contact=contact)

    def _resolve_bearer(self, bearer_token: str) -> AuthIdentity:
        if self.auth_provider is None:
            raise AuthError("Authentication provider not configured")
        return self.auth_provider.get_user(bearer_token)

    def _contact_for(
        self, request: SignupRequest, identity: Optional[AuthIdentity]
    ) -> ContactKeys:
        """Request values first, then whatever the identity carries"""
        metadata = identity.metadata if identity else {}
        email = first_non_empty(request.email, identity.email if identity else None)
        mobile = first_non_empty(
            request.mobile_number,
            identity.phone if identity else None,
            metadata.get("mobile_no"),
            metadata.get("phone"),
        )
        return ContactKeys.build(email, mobile)

    # === INVITATIONS ===

    def resolve_invitation(
        self, token: Optional[str], contact: ContactKeys
    ) -> Optional[InvitationMatch]:
        """Token first (read-only validate), then newest open grant by contact"""
        if token:
            result = self.invitations.validate(token)
            if result.ok:
                return InvitationMatch(grant=result.grant, via_token=True)
            logger.warning(
                f"Invite token not usable ({result.outcome.value}); "
                "falling back to contact lookup"
            )

        grant = self.invitations.find_by_contact(
            contact.raw_mobile or contact.mobile, contact.raw_email or contact.email
        )
        if grant is not None:
            return InvitationMatch(grant=grant, via_token=False)
        return None

    # === USER LOOKUPS ===

    def find_canonical(self, identity_id: str) -> Optional[User]:
        return User.find_by_authid(self.db, identity_id)

    def find_pending_user(
        self,
        email: Optional[str],
        mobile: Optional[str],
        grant_user_id: Optional[str] = None,
    ) -> PendingMatch:
        """Claimable placeholder for the contact: email first, then mobile.

        When several rows match, the most recently created one is returned and
        the count is reported so the duplicate can be investigated.
        """
        email = normalize_email(email)
        mobile = normalize_mobile(mobile)

        if email:
            rows = self._pending_query(
                func.lower(func.trim(User.email)) == email
            ).all()
            if rows:
                return self._pending_match(rows, "email")

        if mobile:
            rows = self._pending_query(User.mobile_no == mobile).all()
            if not rows:
                rows = [
                    u
                    for u in self._pending_query(User.mobile_no.isnot(None)).all()
                    if normalize_mobile(u.mobile_no) == mobile
                ]
            if rows:
                return self._pending_match(rows, "mobile")

        if grant_user_id:
            rows = self._pending_query(User.id == grant_user_id).all()
            if rows:
                return self._pending_match(rows, "invite")

        return PendingMatch()

    def _pending_query(self, condition):
        return (
            self.db.query(User)
            .filter(
                and_(
                    condition,
                    User.is_pending_signup == True,  # noqa: E712
                    User.authid.is_(None),
                )
            )
            .order_by(User.created_at.desc())
        )

    def _pending_match(self, rows: List[User], matched_by: str) -> PendingMatch:
        if len(rows) > 1:
            logger.warning(
                f"{len(rows)} pending users match by {matched_by}; "
                f"using newest {rows[0].id}"
            )
        return PendingMatch(user=rows[0], candidates=len(rows), matched_by=matched_by)

    def find_settled_user(
        self,
        email: Optional[str],
        mobile: Optional[str],
        exclude_identity: Optional[str] = None,
    ) -> Optional[User]:
        """Non-pending user owning the mobile (checked first) or the email"""
        email = normalize_email(email)
        mobile = normalize_mobile(mobile)

        conditions = []
        if mobile:
            conditions.append(User.mobile_no == mobile)
        if email:
            conditions.append(func.lower(func.trim(User.email)) == email)

        for condition in conditions:
            query = self.db.query(User).filter(
                and_(
                    condition,
                    User.is_pending_signup == False,  # noqa: E712
                )
            )
            if exclude_identity:
                query = query.filter(
                    or_(User.authid.is_(None), User.authid != exclude_identity)
                )
            user = query.first()
            if user is not None:
                return user
        return None
