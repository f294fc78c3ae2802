from sqlalchemy.orm import Session
from typing import Optional
import logging
from ..models.user import User
from ..utils.constants import ResponseMessages
from ..utils.validation import normalize_mobile, ValidationHelpers
from .errors import InputError, ConflictError

logger = logging.getLogger(__name__)


class VerificationService:
    """Mobile-number checks done before a signup form is submitted"""

    def __init__(self, db: Session):
        self.db = db

    def _require_mobile(self, raw: Optional[str]) -> str:
        if not raw or not str(raw).strip():
            raise InputError("Mobile number is required")
        mobile = normalize_mobile(raw)
        if not mobile or not ValidationHelpers.validate_phone(mobile):
            raise InputError("Invalid mobile number format")
        return mobile

    def check_mobile_available(self, raw: Optional[str]) -> str:
        """Return the normalized number, or raise if a registered user owns it.

        Placeholder users created ahead of signup do not block the number;
        their rows are merged when the owner signs up.
        """
        mobile = self._require_mobile(raw)

        owner = (
            self.db.query(User)
            .filter(
                User.mobile_no == mobile,
                User.is_pending_signup == False,  # noqa: E712
                User.authid.isnot(None),
            )
            .first()
        )
        if owner is not None:
            raise ConflictError(
                ResponseMessages.MOBILE_ALREADY_OWNED,
                code="MOBILE_ALREADY_OWNED",
                extra={"is_valid": False},
            )
        return mobile

    def request_code(self, raw: Optional[str]) -> str:
        mobile = self._require_mobile(raw)
        # Delivery is handled by the auth provider's phone OTP
        logger.info(f"Verification code requested for {mobile}")
        return mobile
