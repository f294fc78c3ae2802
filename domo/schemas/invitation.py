from pydantic import BaseModel
from typing import Optional
from ..models.enums import InviteStatus


class InviteTokenRequest(BaseModel):
    token: str


class InviteData(BaseModel):
    id: int
    email: Optional[str] = None
    name: Optional[str] = None
    role: Optional[str] = None
    household_id: Optional[str] = None
    status: InviteStatus
    user_id: Optional[str] = None


class InviteTokenResponse(BaseModel):
    success: bool
    data: Optional[InviteData] = None
    error: Optional[str] = None
