import logging
from typing import List

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from goalsync.core.database import utcnow
from goalsync.models import invitation as invitation_model
from goalsync.models import user as user_model
from goalsync.schemas import invitation_schemas
from goalsync.services import team_service

logger = logging.getLogger(__name__)


def invite_player(
    db: Session, team_id: str, invitation_in: invitation_schemas.InvitationCreate, current_user: user_model.User
) -> invitation_model.Invitation:
    db_team = team_service.get_team_or_404(db, team_id)
    team_service.ensure_team_trainer(db_team, current_user, "Only the team trainer can invite players")

    number = invitation_in.number.strip()
    members = team_service.get_team_members(db, team_id)
    if any(member.number is not None and str(member.number) == number for member in members):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Jersey number {number} is already taken")

    db_invitation = invitation_model.Invitation(
        team_id=team_id,
        team_name=db_team.name,
        player_email=invitation_in.player_email.lower(),
        position=invitation_in.position,
        number=number,
        status="pending",
    )
    db.add(db_invitation)
    db.commit()
    db.refresh(db_invitation)
    logger.info("Invitation %s sent for team %s", db_invitation.id, team_id)
    return db_invitation


def get_pending_invitations(db: Session, current_user: user_model.User) -> List[invitation_model.Invitation]:
    return db.query(invitation_model.Invitation).filter(
        invitation_model.Invitation.player_email == current_user.email.lower(),
        invitation_model.Invitation.status == "pending",
    ).all()


def _get_own_invitation(db: Session, invitation_id: str, current_user: user_model.User) -> invitation_model.Invitation:
    db_invitation = db.query(invitation_model.Invitation).filter(invitation_model.Invitation.id == invitation_id).first()
    if not db_invitation:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invitation not found")
    if db_invitation.player_email != current_user.email.lower():
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="This invitation is not for you")
    if db_invitation.status != "pending":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invitation has already been answered")
    return db_invitation


def accept_invitation(db: Session, invitation_id: str, current_user: user_model.User) -> invitation_model.Invitation:
    db_invitation = _get_own_invitation(db, invitation_id, current_user)

    if current_user.team_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You are already part of a team")

    db_team = team_service.get_team_or_404(db, db_invitation.team_id)
    team_service.add_player_to_team(db_team, current_user)
    current_user.position = db_invitation.position
    current_user.number = db_invitation.number

    db_invitation.status = "accepted"
    db_invitation.responded_at = utcnow()
    db_invitation.responded_by = current_user.id

    db.commit()
    db.refresh(db_invitation)
    logger.info("User %s accepted invitation %s", current_user.id, invitation_id)
    return db_invitation


def decline_invitation(db: Session, invitation_id: str, current_user: user_model.User) -> invitation_model.Invitation:
    db_invitation = _get_own_invitation(db, invitation_id, current_user)

    db_invitation.status = "declined"
    db_invitation.responded_at = utcnow()
    db_invitation.responded_by = current_user.id

    db.commit()
    db.refresh(db_invitation)
    return db_invitation
