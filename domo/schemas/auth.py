from pydantic import BaseModel, Field, AliasChoices, field_validator
from typing import Optional
from ..models.enums import UserRole, SignupOutcome
from ..utils.constants import AppConstants


class SignupRequest(BaseModel):
    """Signup input shared by the password, OAuth and link flows"""

    email: Optional[str] = None
    password: Optional[str] = None
    mobile_number: Optional[str] = Field(
        None, validation_alias=AliasChoices("mobile_number", "mobile_no")
    )
    full_name: Optional[str] = Field(None, max_length=AppConstants.MAX_NAME_LENGTH)
    first_name: Optional[str] = Field(None, max_length=AppConstants.MAX_NAME_LENGTH)
    last_name: Optional[str] = Field(None, max_length=AppConstants.MAX_NAME_LENGTH)
    role: UserRole = UserRole.AMO
    invite_token: Optional[str] = Field(
        None, validation_alias=AliasChoices("invite_token", "token")
    )
    link_existing_user: bool = False

    @field_validator("role", mode="before")
    @classmethod
    def default_role(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return UserRole.AMO
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("full_name", "first_name", "last_name", mode="before")
    @classmethod
    def strip_names(cls, v):
        if isinstance(v, str):
            return v.strip() or None
        return v


class SignupResponse(BaseModel):
    success: bool = True
    identity_id: str
    user_id: str
    role: UserRole
    household_id: Optional[str] = None
    outcome: SignupOutcome = SignupOutcome.CREATED
    warning: Optional[str] = None
    message: str
