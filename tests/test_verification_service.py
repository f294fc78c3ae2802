"""Tests for domo.services.verification_service."""

import pytest

from domo.services.errors import ConflictError, InputError
from domo.services.verification_service import VerificationService


class TestCheckMobileAvailable:
    def test_free_number_normalized(self, db):
        assert VerificationService(db).check_mobile_available("0917 123 4567") == "+639171234567"

    def test_registered_owner_conflicts(self, db, make_settled_user):
        make_settled_user(mobile_no="+639171234567")
        with pytest.raises(ConflictError) as exc:
            VerificationService(db).check_mobile_available("09171234567")
        assert exc.value.code == "MOBILE_ALREADY_OWNED"
        assert exc.value.extra == {"is_valid": False}

    def test_pending_placeholder_does_not_block(self, db, make_pending_user):
        make_pending_user(mobile_no="+639171234567")
        assert VerificationService(db).check_mobile_available("09171234567") == "+639171234567"

    @pytest.mark.parametrize("raw", [None, "", "   ", "123"])
    def test_missing_or_invalid(self, db, raw):
        with pytest.raises(InputError):
            VerificationService(db).check_mobile_available(raw)


class TestRequestCode:
    def test_returns_normalized_number(self, db):
        assert VerificationService(db).request_code("0917-123-4567") == "+639171234567"
