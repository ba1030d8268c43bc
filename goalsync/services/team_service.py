import logging
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from goalsync.core.database import utcnow
from goalsync.models import team as team_model
from goalsync.models import user as user_model
from goalsync.models import invitation as invitation_model
from goalsync.models import event as event_model
from goalsync.schemas import team_schemas

logger = logging.getLogger(__name__)


def get_team(db: Session, team_id: str) -> Optional[team_model.Team]:
    return db.query(team_model.Team).filter(team_model.Team.id == team_id).first()


def get_team_or_404(db: Session, team_id: str) -> team_model.Team:
    team = get_team(db, team_id)
    if not team:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Team not found")
    return team


def ensure_team_trainer(team: team_model.Team, user: user_model.User, detail: str) -> None:
    """Raise 403 unless ``user`` owns ``team``."""
    if team.trainer_id != user.id:
        logger.warning("User %s denied on team %s: %s", user.id, team.id, detail)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


def is_team_member(team: team_model.Team, user: user_model.User) -> bool:
    return user.team_id == team.id or user.id in (team.players or []) or team.trainer_id == user.id


def ensure_team_member(team: team_model.Team, user: user_model.User, detail: str) -> None:
    if not is_team_member(team, user):
        logger.warning("User %s is not a member of team %s", user.id, team.id)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


def clear_team_association(user: user_model.User) -> None:
    user.team_id = None
    user.role = None
    user.position = None
    user.number = None
    user.updated_at = utcnow()


def create_team(db: Session, team_in: team_schemas.TeamCreate, trainer: user_model.User) -> team_model.Team:
    if trainer.type != "trainer":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only trainers can create teams")
    if trainer.team_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You are already part of a team")

    db_team = team_model.Team(
        name=team_in.name,
        trainer_id=trainer.id,
        players=[],
        allow_player_injury_reporting=True,
    )
    db.add(db_team)
    db.flush()

    trainer.team_id = db_team.id
    trainer.role = "staff"
    trainer.position = "Head Coach"
    trainer.updated_at = utcnow()

    db.commit()
    db.refresh(db_team)
    logger.info("Trainer %s created team %s", trainer.id, db_team.id)
    return db_team


def get_team_by_trainer(db: Session, trainer: user_model.User) -> Optional[team_model.Team]:
    return db.query(team_model.Team).filter(team_model.Team.trainer_id == trainer.id).first()


def update_team_name(db: Session, team_id: str, new_name: str, current_user: user_model.User) -> team_model.Team:
    db_team = get_team_or_404(db, team_id)
    ensure_team_trainer(db_team, current_user, "Only the team trainer can update team name")

    db_team.name = new_name
    db.commit()
    db.refresh(db_team)
    return db_team


def update_team_settings(
    db: Session, team_id: str, settings_in: team_schemas.TeamSettingsUpdate, current_user: user_model.User
) -> team_model.Team:
    db_team = get_team_or_404(db, team_id)
    ensure_team_trainer(db_team, current_user, "Only the team trainer can update team settings")

    update_data = settings_in.model_dump(exclude_unset=True, exclude_none=True)
    for key, value in update_data.items():
        setattr(db_team, key, value)

    db.commit()
    db.refresh(db_team)
    return db_team


def delete_team(db: Session, team_id: str, current_user: user_model.User) -> bool:
    db_team = get_team_or_404(db, team_id)
    ensure_team_trainer(db_team, current_user, "Only the team trainer can delete the team")

    # Users can hold stale references, so clean up by team_id rather than by the players list
    stale_users = db.query(user_model.User).filter(user_model.User.team_id == team_id).all()
    for member in stale_users:
        clear_team_association(member)

    db.query(invitation_model.Invitation).filter(invitation_model.Invitation.team_id == team_id).delete()

    db.delete(db_team)
    db.commit()
    logger.info("Team %s deleted by %s (%d members detached)", team_id, current_user.id, len(stale_users))
    return True


def remove_player(db: Session, team_id: str, player_id: str, current_user: user_model.User) -> team_model.Team:
    db_team = get_team_or_404(db, team_id)
    ensure_team_trainer(db_team, current_user, "Only the team trainer can remove players")

    if player_id not in (db_team.players or []):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Player is not part of this team")

    db_team.players = [pid for pid in db_team.players if pid != player_id]

    player = db.query(user_model.User).filter(user_model.User.id == player_id).first()
    if player and player.team_id == team_id:
        clear_team_association(player)

    db.commit()
    db.refresh(db_team)
    logger.info("Player %s removed from team %s", player_id, team_id)
    return db_team


def add_player_to_team(db_team: team_model.Team, player: user_model.User) -> None:
    """Add ``player`` to the team roster without duplicates. Caller commits."""
    if player.id not in (db_team.players or []):
        db_team.players = list(db_team.players or []) + [player.id]
    player.team_id = db_team.id
    player.role = "player"
    player.updated_at = utcnow()


def join_team(db: Session, team_id: str, current_user: user_model.User) -> team_model.Team:
    """Join a team by id, as encoded in the team's QR code."""
    if current_user.team_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You are already part of a team")
    if current_user.type == "trainer":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Trainers cannot join a team as a player")

    db_team = get_team_or_404(db, team_id)
    add_player_to_team(db_team, current_user)

    db.commit()
    db.refresh(db_team)
    logger.info("User %s joined team %s", current_user.id, team_id)
    return db_team


def get_team_members(db: Session, team_id: str) -> List[team_schemas.TeamMember]:
    db_team = get_team_or_404(db, team_id)

    members: List[team_schemas.TeamMember] = []

    trainer = db.query(user_model.User).filter(user_model.User.id == db_team.trainer_id).first()
    if trainer:
        members.append(team_schemas.TeamMember(
            id=trainer.id, name=trainer.name, number=None, position="Coach", role="staff", status="active"
        ))

    player_ids = db_team.players or []
    if player_ids:
        players = db.query(user_model.User).filter(user_model.User.id.in_(player_ids)).all()
        by_id = {p.id: p for p in players}
        # Keep the order in which players joined
        for player_id in player_ids:
            player = by_id.get(player_id)
            if not player:
                continue
            members.append(team_schemas.TeamMember(
                id=player.id,
                name=player.name,
                number=player.number or None,
                position=player.position or "Unassigned",
                role="player",
                status=player.status or "active",
            ))
    return members


def fix_trainer_team_association(db: Session, trainer: user_model.User) -> str:
    db_team = get_team_by_trainer(db, trainer)
    if not db_team:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No team found for this trainer")

    trainer.team_id = db_team.id
    trainer.updated_at = utcnow()
    db.commit()
    return db_team.id


def get_injured_players_in_upcoming_matches(
    db: Session, team_id: str, current_user: user_model.User
) -> List[team_schemas.InjuredPlayerInMatch]:
    db_team = get_team_or_404(db, team_id)
    ensure_team_trainer(db_team, current_user, "Only the team trainer can view injury warnings")

    injured = {
        m.id: m for m in get_team_members(db, team_id) if m.role == "player" and m.status == "injured"
    }
    if not injured:
        return []

    upcoming = db.query(event_model.Event).filter(
        event_model.Event.team_id == team_id,
        event_model.Event.type == "match",
        event_model.Event.status == "scheduled",
        event_model.Event.start_time > utcnow(),
    ).order_by(event_model.Event.start_time.asc()).all()

    warnings = []
    for match in upcoming:
        for entry in match.roster or []:
            member = injured.get(entry.get("id"))
            if member:
                warnings.append(team_schemas.InjuredPlayerInMatch(
                    id=member.id,
                    name=member.name,
                    match_id=match.id,
                    match_title=match.title,
                    start_time=match.start_time,
                ))
    return warnings
