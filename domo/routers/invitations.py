from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from ..database import get_db
from ..schemas.invitation import InviteTokenRequest, InviteTokenResponse
from ..services.invitation_service import InvitationService
from ..utils.router_helpers import handle_service_errors

router = APIRouter(tags=["invitations"])


@router.post("/validate", response_model=InviteTokenResponse)
@handle_service_errors
async def validate_invite(
    request: InviteTokenRequest, db: Session = Depends(get_db)
):
    """Check a token without using it up"""
    return InvitationService(db).validate(request.token).to_remote()


@router.post("/consume", response_model=InviteTokenResponse)
@handle_service_errors
async def consume_invite(request: InviteTokenRequest, db: Session = Depends(get_db)):
    return InvitationService(db).consume(request.token).to_remote()
