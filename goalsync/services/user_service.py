import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from goalsync.core.database import utcnow
from goalsync.models import user as user_model
from goalsync.schemas import user_schemas
from goalsync.services import team_service

logger = logging.getLogger(__name__)


def update_profile(
    db: Session, current_user: user_model.User, profile_in: user_schemas.UserProfileUpdate
) -> user_model.User:
    update_data = profile_in.model_dump(exclude_unset=True, exclude_none=True)

    if update_data.get("number") and current_user.team_id:
        team = team_service.get_team(db, current_user.team_id)
        if team:
            for member in team_service.get_team_members(db, team.id):
                if member.id != current_user.id and member.number == update_data["number"]:
                    raise HTTPException(
                        status_code=status.HTTP_400_BAD_REQUEST,
                        detail=f"Jersey number {update_data['number']} is already taken",
                    )

    for key, value in update_data.items():
        setattr(current_user, key, value)

    db.commit()
    db.refresh(current_user)
    return current_user


def save_push_token(db: Session, current_user: user_model.User, token: str) -> user_model.User:
    existing_tokens = current_user.push_tokens or []
    if token not in existing_tokens:
        current_user.push_tokens = list(existing_tokens) + [token]
        db.commit()
        db.refresh(current_user)
        logger.info("Push token saved for user %s", current_user.id)
    return current_user


def update_member_status(
    db: Session, member_id: str, new_status: str, current_user: user_model.User
) -> user_model.User:
    """
    Change a team member's availability (active, injured, inactive).

    The team trainer may update any member of their team. A player may update
    only their own status, and only when the team allows player injury
    reporting.
    """
    member = db.query(user_model.User).filter(user_model.User.id == member_id).first()
    if not member or not member.team_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Team member not found")

    team = team_service.get_team_or_404(db, member.team_id)

    if team.trainer_id != current_user.id:
        if member.id != current_user.id:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You can only update your own status")
        if not team.allow_player_injury_reporting:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Injury reporting by players is disabled for this team",
            )
        if new_status == "inactive":
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail="Only the team trainer can mark players inactive"
            )

    member.status = new_status
    member.updated_at = utcnow()
    db.commit()
    db.refresh(member)
    logger.info("Status of %s set to %s by %s", member.id, new_status, current_user.id)
    return member
