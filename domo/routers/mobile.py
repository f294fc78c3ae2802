from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from ..database import get_db
from ..schemas.mobile import (
    MobileNumberRequest,
    MobileValidationResponse,
    VerificationCodeResponse,
)
from ..services.verification_service import VerificationService
from ..utils.constants import ResponseMessages
from ..utils.router_helpers import handle_service_errors

router = APIRouter(tags=["mobile"])


@router.post("/validate", response_model=MobileValidationResponse)
@handle_service_errors
async def validate_mobile(request: MobileNumberRequest, db: Session = Depends(get_db)):
    """Is the number free to register?"""
    mobile = VerificationService(db).check_mobile_available(request.mobile_number)
    return MobileValidationResponse(
        is_valid=True,
        message=ResponseMessages.MOBILE_AVAILABLE,
        mobile_number=mobile,
    )


@router.post("/send-verification-code", response_model=VerificationCodeResponse)
@handle_service_errors
async def send_verification_code(
    request: MobileNumberRequest, db: Session = Depends(get_db)
):
    mobile = VerificationService(db).request_code(request.mobile_number)
    return VerificationCodeResponse(
        message=ResponseMessages.OTP_REQUESTED, mobile_number=mobile
    )
