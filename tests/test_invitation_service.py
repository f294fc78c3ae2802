"""Tests for domo.services.invitation_service: the single-use invite ledger."""

import uuid

from domo.models.staff_invite import StaffInvite
from domo.services.invitation_service import InvitationService, LedgerOutcome


class TestValidate:
    def test_unknown_token_not_found(self, db):
        result = InvitationService(db).validate(str(uuid.uuid4()))
        assert result.outcome == LedgerOutcome.NOT_FOUND
        assert result.grant is None

    def test_malformed_token_not_found(self, db):
        assert InvitationService(db).validate("not-a-token").outcome == LedgerOutcome.NOT_FOUND
        assert InvitationService(db).validate(None).outcome == LedgerOutcome.NOT_FOUND

    def test_open_grant_is_ok_and_untouched(self, db, make_invite):
        invite = make_invite(email="rosa@example.com")
        result = InvitationService(db).validate(invite.token)

        assert result.ok
        assert result.grant.id == invite.id
        db.refresh(invite)
        assert invite.status == "new"

    def test_token_with_surrounding_spaces(self, db, make_invite):
        invite = make_invite()
        assert InvitationService(db).validate(f"  {invite.token} ").ok


class TestConsume:
    def test_consume_marks_done(self, db, make_invite):
        invite = make_invite()
        result = InvitationService(db).consume(invite.token)

        assert result.ok
        assert result.grant.status == "done"

    def test_second_consume_already_consumed(self, db, make_invite):
        invite = make_invite()
        service = InvitationService(db)
        service.consume(invite.token)

        again = service.consume(invite.token)
        assert again.outcome == LedgerOutcome.ALREADY_CONSUMED
        assert again.grant.id == invite.id
        assert service.validate(invite.token).outcome == LedgerOutcome.ALREADY_CONSUMED

    def test_consume_unknown_token(self, db):
        assert InvitationService(db).consume(str(uuid.uuid4())).outcome == LedgerOutcome.NOT_FOUND

    def test_claim_by_id(self, db, make_invite):
        invite = make_invite()
        service = InvitationService(db)
        assert service.claim(invite.id).ok
        assert service.claim(invite.id).outcome == LedgerOutcome.ALREADY_CONSUMED
        assert service.claim(999999).outcome == LedgerOutcome.NOT_FOUND

    def test_two_sessions_that_both_validated(self, session_factory, make_invite):
        invite = make_invite()
        first, second = session_factory(), session_factory()
        try:
            a, b = InvitationService(first), InvitationService(second)
            assert a.validate(invite.token).ok
            assert b.validate(invite.token).ok

            assert a.consume(invite.token).ok
            assert b.consume(invite.token).outcome == LedgerOutcome.ALREADY_CONSUMED
        finally:
            first.close()
            second.close()

    def test_many_consumers_exactly_one_wins(self, session_factory, make_invite):
        invite = make_invite()
        sessions = [session_factory() for _ in range(5)]
        try:
            outcomes = [InvitationService(s).consume(invite.token).outcome for s in sessions]
        finally:
            for s in sessions:
                s.close()

        assert outcomes.count(LedgerOutcome.OK) == 1
        assert outcomes.count(LedgerOutcome.ALREADY_CONSUMED) == 4

    def test_remote_contract(self, db, make_invite):
        invite = make_invite(email="rosa@example.com", household_id=None)
        service = InvitationService(db)

        ok = service.consume(invite.token).to_remote()
        assert ok["success"] is True
        assert ok["data"]["status"] == "done"
        assert ok["data"]["email"] == "rosa@example.com"

        used = service.consume(invite.token).to_remote()
        assert used["success"] is False
        assert "already been used" in used["error"]

        missing = service.consume(str(uuid.uuid4())).to_remote()
        assert missing == {"success": False, "error": "Invite token not found"}


class TestFindByContact:
    def test_matches_legacy_mobile_format(self, db, make_invite):
        invite = make_invite(mobile="0917 123 4567")
        found = InvitationService(db).find_by_contact("+639171234567", None)
        assert found.id == invite.id

    def test_matches_raw_and_normalized_mobile(self, db, make_invite):
        invite = make_invite(mobile="+639171234567")
        found = InvitationService(db).find_by_contact("0917-123-4567", None)
        assert found.id == invite.id

    def test_email_is_case_insensitive(self, db, make_invite):
        invite = make_invite(email="Rosa@Example.com")
        found = InvitationService(db).find_by_contact(None, " rosa@example.COM ")
        assert found.id == invite.id

    def test_mobile_checked_before_email(self, db, make_invite):
        by_email = make_invite(email="rosa@example.com")
        by_mobile = make_invite(mobile="+639171234567")
        found = InvitationService(db).find_by_contact("+639171234567", "rosa@example.com")
        assert found.id == by_mobile.id
        assert found.id != by_email.id

    def test_newest_open_grant_wins(self, db, make_invite, jan, feb):
        make_invite(email="rosa@example.com", created_at=jan)
        newer = make_invite(email="rosa@example.com", created_at=feb)
        assert InvitationService(db).find_by_contact(None, "rosa@example.com").id == newer.id

    def test_consumed_grants_ignored(self, db, make_invite):
        make_invite(email="rosa@example.com", status="done")
        assert InvitationService(db).find_by_contact(None, "rosa@example.com") is None

    def test_no_contact(self, db):
        assert InvitationService(db).find_by_contact(None, None) is None


class TestStampUser:
    def test_stamps_only_once(self, db, make_invite, make_settled_user):
        invite = make_invite()
        first = make_settled_user(email="one@example.com")
        second = make_settled_user(email="two@example.com")
        service = InvitationService(db)

        assert service.stamp_user(invite.id, first.id) is True
        assert service.stamp_user(invite.id, second.id) is False

        stored = db.query(StaffInvite).filter(StaffInvite.id == invite.id).one()
        assert stored.user_id == first.id
