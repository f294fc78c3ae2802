"""Signup orchestration shared by the password, OAuth and link flows.

Only input, credential, conflict and not-found problems abort a signup.
Everything after the auth identity exists (merge, household, membership,
invite bookkeeping) degrades to a warning on an otherwise successful result.
"""
from dataclasses import dataclass, field
from typing import Optional, List
import logging

from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from ..models.user import User
from ..models.staff_invite import StaffInvite
from ..models.enums import UserRole, SignupOutcome, AuthMethod
from ..schemas.auth import SignupRequest, SignupResponse
from ..utils.constants import ResponseMessages
from ..utils.validation import (
    split_display_name,
    placeholder_auth_email,
    primary_auth_method,
    first_non_empty,
)
from .auth_provider import AuthProvider, AuthIdentity
from .errors import AuthError, ConflictError, NotFoundError, FatalError
from .household_service import (
    HouseholdService,
    HouseholdServiceError,
    JoinCodeExhaustedError,
)
from .identity_service import (
    IdentityResolver,
    InvitationMatch,
    LinkExistingUser,
    OAuthSignup,
    SignupFlow,
)
from .invitation_service import InvitationService
from .membership_service import MembershipService
from .reconciliation_service import (
    CanonicalDraft,
    DegradationReason,
    MergeOutcome,
    ReconciliationService,
)

logger = logging.getLogger(__name__)


@dataclass
class SignupResult:
    identity_id: str
    user_id: str
    role: UserRole
    household_id: Optional[str] = None
    outcome: SignupOutcome = SignupOutcome.CREATED
    warnings: List[str] = field(default_factory=list)
    merged_pending_id: Optional[str] = None
    invite_id: Optional[int] = None
    success: bool = True

    @property
    def warning(self) -> Optional[str]:
        return " ".join(self.warnings) or None

    @property
    def message(self) -> str:
        if self.outcome == SignupOutcome.LINKED:
            return ResponseMessages.SIGNUP_LINKED
        if self.role == UserRole.KASAMBAHAY:
            return ResponseMessages.SIGNUP_CREATED_STAFF
        return ResponseMessages.SIGNUP_CREATED

    def to_response(self) -> SignupResponse:
        return SignupResponse(
            success=self.success,
            identity_id=self.identity_id,
            user_id=self.user_id,
            role=self.role,
            household_id=self.household_id,
            outcome=self.outcome,
            warning=self.warning,
            message=self.message,
        )


class SignupService:
    def __init__(
        self,
        db: Session,
        auth_provider: Optional[AuthProvider] = None,
        household_service: Optional[HouseholdService] = None,
    ):
        self.db = db
        self.auth_provider = auth_provider
        self.invitations = InvitationService(db)
        self.resolver = IdentityResolver(db, auth_provider, self.invitations)
        self.reconciliation = ReconciliationService(db)
        self.households = household_service or HouseholdService(db)
        self.memberships = MembershipService(db)

    def signup(
        self,
        request: SignupRequest,
        bearer_token: Optional[str] = None,
        require_bearer: bool = False,
    ) -> SignupResult:
        flow = self.resolver.classify(request, bearer_token, require_bearer)

        if isinstance(flow, LinkExistingUser):
            return self._link_existing(flow)

        contact = flow.contact
        invitation = self.resolver.resolve_invitation(request.invite_token, contact)

        exclude = flow.identity.id if isinstance(flow, OAuthSignup) else None
        owner = self.resolver.find_settled_user(contact.email, contact.mobile, exclude)
        if owner is not None:
            # Neither a password nor another identity's bearer proves ownership;
            # invitations for an owned contact go through the link flow.
            if invitation is not None:
                logger.warning(
                    f"Signup for contact owned by user {owner.id} carried invite "
                    f"{invitation.grant.id}; link with the account's credential instead"
                )
            raise ConflictError(
                "An account with this mobile number or email already exists",
                code="CONTACT_ALREADY_OWNED",
            )

        if isinstance(flow, OAuthSignup):
            identity = flow.identity
        else:
            identity = self._create_identity(flow, invitation)

        return self._onboard(flow, identity, invitation)

    # === FLOWS ===

    def _create_identity(
        self, flow: SignupFlow, invitation: Optional[InvitationMatch]
    ) -> AuthIdentity:
        if self.auth_provider is None:
            raise FatalError("Authentication provider not configured")

        request = flow.request
        contact = flow.contact
        invite_name = invitation.grant.display_name if invitation else None
        full_name = first_non_empty(invite_name, request.full_name) or ""
        first_name, last_name = split_display_name(full_name)
        role = UserRole.KASAMBAHAY if invitation else request.role

        metadata = {
            "full_name": full_name,
            "first_name": request.first_name or first_name or "",
            "last_name": request.last_name or last_name or "",
            "mobile_no": contact.mobile or contact.raw_mobile,
            "role": role.value,
            "nickname": full_name,
        }
        auth_email = contact.email or placeholder_auth_email(contact.mobile)

        identity = self.auth_provider.create_user(auth_email, request.password, metadata)
        logger.info(f"Created auth identity {identity.id} with role {role.value}")
        return identity

    def _onboard(
        self,
        flow: SignupFlow,
        identity: AuthIdentity,
        invitation: Optional[InvitationMatch],
    ) -> SignupResult:
        contact = flow.contact
        warnings: List[str] = []

        grant = self._consume(invitation, contact, warnings)
        role = UserRole.KASAMBAHAY if grant is not None else flow.request.role
        existing = self.resolver.find_canonical(identity.id)
        if grant is None and existing is not None:
            # Repeat OAuth onboarding keeps the role already granted
            role = UserRole(existing.role)
        draft = self._draft(flow, identity, role, grant)

        pending = self.resolver.find_pending_user(
            contact.email, contact.mobile, grant.user_id if grant is not None else None
        )

        user: Optional[User] = None
        merged_pending_id = None
        if pending.found:
            merge = self.reconciliation.merge(pending.user, draft)
            if isinstance(merge, MergeOutcome):
                user = merge.user
                merged_pending_id = merge.pending_id
            elif merge.reason == DegradationReason.FAILED:
                warnings.append("Pending profile could not be merged.")

        if user is None:
            try:
                user = self.reconciliation.upsert_canonical(draft)
            except IntegrityError as e:
                self.db.rollback()
                logger.error(f"User profile creation error: {e}")
                return SignupResult(
                    identity_id=identity.id,
                    user_id=identity.id,
                    role=role,
                    warnings=[ResponseMessages.PROFILE_INCOMPLETE],
                )
            except SQLAlchemyError as e:
                self.db.rollback()
                raise FatalError(f"Could not store user profile: {e}")

        if grant is not None:
            self._apply_invitation(user, grant, warnings)
        else:
            if user.household_id:
                self._ensure_member(user.household_id, user.id, warnings)
            self._provision(user, role, warnings)

        self.db.refresh(user)
        return SignupResult(
            identity_id=identity.id,
            user_id=user.id,
            role=UserRole(user.role),
            household_id=user.household_id,
            warnings=warnings,
            merged_pending_id=merged_pending_id,
            invite_id=grant.id if grant is not None else None,
        )

    def _link_existing(self, flow: LinkExistingUser) -> SignupResult:
        contact = flow.contact
        user = self.resolver.find_settled_user(contact.email, contact.mobile)
        if user is None:
            raise NotFoundError("No existing account matches this mobile number or email")

        if flow.identity is None:
            raise AuthError("Sign in to the existing account before linking an invitation")
        if user.authid != flow.identity.id:
            raise AuthError("Credential does not belong to the matching account")

        invitation = self.resolver.resolve_invitation(flow.request.invite_token, contact)
        if invitation is None:
            raise NotFoundError("No open invitation for this account")

        return self._apply_link(user, invitation, flow)

    def _apply_link(
        self, user: User, invitation: InvitationMatch, flow: SignupFlow
    ) -> SignupResult:
        warnings: List[str] = []
        grant = self._consume(invitation, flow.contact, warnings)
        if grant is None:
            raise NotFoundError("Invitation has already been used")

        self._apply_invitation(user, grant, warnings)
        self.db.refresh(user)
        return SignupResult(
            identity_id=user.authid or user.id,
            user_id=user.id,
            role=UserRole(user.role),
            household_id=user.household_id,
            outcome=SignupOutcome.LINKED,
            warnings=warnings,
            invite_id=grant.id,
        )

    # === STAGES ===

    def _consume(
        self, invitation: Optional[InvitationMatch], contact, warnings: List[str]
    ) -> Optional[StaffInvite]:
        """Take the grant; a lost race falls back to another open grant"""
        if invitation is None:
            return None

        try:
            if invitation.via_token:
                result = self.invitations.consume(invitation.grant.token)
            else:
                result = self.invitations.claim(invitation.grant.id)
            if result.ok:
                return result.grant

            logger.info(
                f"Invite {invitation.grant.id} {result.outcome.value}; "
                "retrying contact lookup"
            )
            fallback = self.invitations.find_by_contact(
                contact.raw_mobile or contact.mobile, contact.raw_email or contact.email
            )
            if fallback is not None:
                retry = self.invitations.claim(fallback.id)
                if retry.ok:
                    return retry.grant
            return None

        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Staff invite status update error: {e}")
            warnings.append("Invitation status could not be updated.")
            return invitation.grant

    def _draft(
        self,
        flow: SignupFlow,
        identity: AuthIdentity,
        role: UserRole,
        grant: Optional[StaffInvite],
    ) -> CanonicalDraft:
        request = flow.request
        metadata = identity.metadata or {}
        invite_name = grant.display_name if grant is not None else None

        full_name = first_non_empty(
            invite_name,
            request.full_name,
            metadata.get("display_name"),
            metadata.get("full_name"),
            metadata.get("name"),
        )
        split_first, split_last = split_display_name(full_name)
        provider = (
            identity.provider if isinstance(flow, OAuthSignup) else AuthMethod.EMAIL.value
        )

        return CanonicalDraft(
            identity_id=identity.id,
            role=role,
            email=flow.contact.email,
            mobile_no=flow.contact.mobile,
            full_name=full_name,
            first_name=first_non_empty(
                request.first_name,
                metadata.get("first_name"),
                metadata.get("given_name"),
                split_first,
            ),
            last_name=first_non_empty(
                request.last_name,
                metadata.get("last_name"),
                metadata.get("family_name"),
                split_last,
            ),
            nick_name=first_non_empty(invite_name, request.full_name),
            specific_role=grant.role if grant is not None else None,
            household_id=grant.household_id if grant is not None else None,
            profile_picture=first_non_empty(
                metadata.get("profile_picture"), metadata.get("avatar_url")
            ),
            primary_auth_method=primary_auth_method(flow.contact.mobile, provider),
            oauth_linked=provider
            not in (AuthMethod.EMAIL.value, AuthMethod.PHONE.value),
        )

    def _apply_invitation(
        self, user: User, grant: StaffInvite, warnings: List[str]
    ) -> None:
        try:
            if grant.household_id:
                self.households.assign_household(user, grant.household_id, grant.role)
            elif user.role != UserRole.KASAMBAHAY.value:
                user.role = UserRole.KASAMBAHAY.value
                self.db.commit()
        except (HouseholdServiceError, SQLAlchemyError) as e:
            self.db.rollback()
            logger.error(f"Failed to assign invite household: {e}")
            warnings.append("Household from the invitation could not be assigned.")

        try:
            self.invitations.stamp_user(grant.id, user.id)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to link invite {grant.id} to user: {e}")
            warnings.append("Invitation could not be linked to the account.")

    def _ensure_member(self, household_id: str, user_id: str, warnings: List[str]):
        try:
            self.memberships.ensure_member(household_id, user_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to insert household_members row: {e}")
            warnings.append("Household membership could not be created.")

    def _provision(self, user: User, role: UserRole, warnings: List[str]) -> None:
        try:
            self.households.provision_default_household(
                user, role, has_invitation=False
            )
        except JoinCodeExhaustedError as e:
            logger.error(f"Household creation aborted for {user.id}: {e}")
            warnings.append(ResponseMessages.HOUSEHOLD_INCOMPLETE)
        except (HouseholdServiceError, SQLAlchemyError) as e:
            self.db.rollback()
            logger.error(f"Error creating household automatically: {e}")
            warnings.append(ResponseMessages.HOUSEHOLD_INCOMPLETE)
