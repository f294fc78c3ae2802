from pydantic import BaseModel, Field, AliasChoices
from typing import Optional


class MobileNumberRequest(BaseModel):
    mobile_number: Optional[str] = Field(
        None, validation_alias=AliasChoices("mobile_number", "mobile_no")
    )


class MobileValidationResponse(BaseModel):
    is_valid: bool
    message: str
    mobile_number: Optional[str] = None


class VerificationCodeResponse(BaseModel):
    message: str
    mobile_number: str
