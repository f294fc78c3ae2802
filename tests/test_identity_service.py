"""Tests for domo.services.identity_service: flow classification and lookups."""

import pytest

from domo.schemas.auth import SignupRequest
from domo.services.errors import AuthError, InputError
from domo.services.identity_service import (
    ContactKeys,
    IdentityResolver,
    LinkExistingUser,
    OAuthSignup,
    PasswordSignup,
)
from domo.services.invitation_service import InvitationService


class TestClassify:
    def test_password_flow(self, db):
        request = SignupRequest(
            mobile_no="0917 123 4567", password="secret1", full_name="Maria Santos"
        )
        flow = IdentityResolver(db).classify(request)

        assert isinstance(flow, PasswordSignup)
        assert flow.contact.mobile == "+639171234567"
        assert flow.contact.raw_mobile == "0917 123 4567"
        assert flow.contact.email is None

    def test_password_flow_requires_password_and_name(self, db):
        with pytest.raises(InputError, match="password and full_name"):
            IdentityResolver(db).classify(SignupRequest(email="ana@example.com"))

    def test_password_flow_requires_contact(self, db):
        request = SignupRequest(password="secret1", full_name="Ana")
        with pytest.raises(InputError, match="mobile number or email"):
            IdentityResolver(db).classify(request)

    def test_short_password_rejected(self, db):
        request = SignupRequest(email="ana@example.com", password="123", full_name="Ana")
        with pytest.raises(InputError, match="at least 6"):
            IdentityResolver(db).classify(request)

    def test_bearer_selects_oauth(self, db, auth_provider):
        auth_provider.add_session(
            "tok", email="Juan@Example.com", metadata={"mobile_no": "09171234567"}
        )
        flow = IdentityResolver(db, auth_provider).classify(SignupRequest(), "tok")

        assert isinstance(flow, OAuthSignup)
        assert flow.contact.email == "juan@example.com"
        assert flow.contact.mobile == "+639171234567"

    def test_request_contact_overrides_identity(self, db, auth_provider):
        auth_provider.add_session("tok", email="juan@example.com")
        request = SignupRequest(email="other@example.com")
        flow = IdentityResolver(db, auth_provider).classify(request, "tok")
        assert flow.contact.email == "other@example.com"

    def test_invalid_bearer(self, db, auth_provider):
        with pytest.raises(AuthError):
            IdentityResolver(db, auth_provider).classify(SignupRequest(), "bogus")

    def test_required_bearer_missing(self, db, auth_provider):
        with pytest.raises(AuthError):
            IdentityResolver(db, auth_provider).classify(
                SignupRequest(email="ana@example.com"), None, require_bearer=True
            )

    def test_link_flag_wins(self, db, auth_provider):
        auth_provider.add_session("tok", email="ana@example.com")
        request = SignupRequest(link_existing_user=True, email="ana@example.com")
        flow = IdentityResolver(db, auth_provider).classify(request, "tok")

        assert isinstance(flow, LinkExistingUser)
        assert flow.identity is not None

    def test_link_requires_contact(self, db):
        with pytest.raises(InputError):
            IdentityResolver(db).classify(SignupRequest(link_existing_user=True))


class TestResolveInvitation:
    def test_valid_token(self, db, make_invite):
        invite = make_invite(email="rosa@example.com")
        match = IdentityResolver(db).resolve_invitation(
            invite.token, ContactKeys.build(None, None)
        )
        assert match.grant.id == invite.id
        assert match.via_token is True

    def test_used_token_falls_back_to_contact(self, db, make_invite):
        used = make_invite(email="rosa@example.com", status="done")
        open_invite = make_invite(mobile="+639171234567")
        match = IdentityResolver(db).resolve_invitation(
            used.token, ContactKeys.build(None, "09171234567")
        )
        assert match.grant.id == open_invite.id
        assert match.via_token is False

    def test_nothing_applies(self, db):
        assert IdentityResolver(db).resolve_invitation(
            None, ContactKeys.build("ana@example.com", None)
        ) is None

    def test_validation_does_not_consume(self, db, make_invite):
        invite = make_invite()
        IdentityResolver(db).resolve_invitation(invite.token, ContactKeys())
        assert InvitationService(db).validate(invite.token).ok


class TestFindPendingUser:
    def test_email_checked_first(self, db, make_pending_user):
        by_email = make_pending_user(email="ana@example.com")
        make_pending_user(mobile_no="+639171234567")

        match = IdentityResolver(db).find_pending_user(
            "ANA@example.com", "09171234567"
        )
        assert match.user.id == by_email.id
        assert match.matched_by == "email"

    def test_mobile_in_legacy_format(self, db, make_pending_user):
        pending = make_pending_user(mobile_no="0917 123 4567")
        match = IdentityResolver(db).find_pending_user(None, "+639171234567")
        assert match.user.id == pending.id
        assert match.matched_by == "mobile"

    def test_newest_of_several_wins(self, db, make_pending_user, jan, feb):
        make_pending_user(email="ana@example.com", created_at=jan)
        newer = make_pending_user(email="Ana@Example.com", created_at=feb)

        match = IdentityResolver(db).find_pending_user("ana@example.com", None)
        assert match.user.id == newer.id
        assert match.candidates == 2
        assert match.ambiguous

    def test_grant_user_fallback(self, db, make_pending_user):
        pending = make_pending_user(full_name="Rosa")
        match = IdentityResolver(db).find_pending_user(
            "rosa@example.com", None, grant_user_id=pending.id
        )
        assert match.user.id == pending.id
        assert match.matched_by == "invite"

    def test_settled_users_not_claimable(self, db, make_settled_user):
        make_settled_user(email="ana@example.com")
        assert not IdentityResolver(db).find_pending_user("ana@example.com", None).found


class TestFindSettledUser:
    def test_mobile_owner(self, db, make_settled_user):
        owner = make_settled_user(mobile_no="+639171234567")
        found = IdentityResolver(db).find_settled_user(None, "0917 123 4567")
        assert found.id == owner.id

    def test_own_identity_excluded(self, db, make_settled_user):
        owner = make_settled_user(email="juan@example.com")
        resolver = IdentityResolver(db)
        assert resolver.find_settled_user("juan@example.com", None) is not None
        assert resolver.find_settled_user(
            "juan@example.com", None, exclude_identity=owner.authid
        ) is None

    def test_pending_rows_ignored(self, db, make_pending_user):
        make_pending_user(email="ana@example.com")
        assert IdentityResolver(db).find_settled_user("ana@example.com", None) is None
