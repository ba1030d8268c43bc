from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from goalsync.services import auth_service, invitation_service
from goalsync.models import user as user_model
from goalsync.schemas import invitation_schemas
from goalsync.api.dependencies import get_db

router = APIRouter()


@router.get("/", response_model=List[invitation_schemas.InvitationRead])
async def get_pending_invitations_endpoint(
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return invitation_service.get_pending_invitations(db=db, current_user=current_user)


@router.post("/{invitation_id}/accept", response_model=invitation_schemas.InvitationRead)
async def accept_invitation_endpoint(
    invitation_id: str,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return invitation_service.accept_invitation(db=db, invitation_id=invitation_id, current_user=current_user)


@router.post("/{invitation_id}/decline", response_model=invitation_schemas.InvitationRead)
async def decline_invitation_endpoint(
    invitation_id: str,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return invitation_service.decline_invitation(db=db, invitation_id=invitation_id, current_user=current_user)
