import logging
from datetime import datetime
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from goalsync.models import event as event_model
from goalsync.models import user as user_model
from goalsync.schemas import event_schemas
from goalsync.services import chat_service, team_service

logger = logging.getLogger(__name__)

MAX_STARTERS = 11

FORMATION_TEMPLATES = [
    event_schemas.FormationTemplate(
        id="4-4-2", name="4-4-2 Classic", description="4 Defenders, 4 Midfielders, 2 Forwards",
        positions={"DEF": 4, "MID": 4, "FWD": 2},
    ),
    event_schemas.FormationTemplate(
        id="4-3-3", name="4-3-3 Attack", description="4 Defenders, 3 Midfielders, 3 Forwards",
        positions={"DEF": 4, "MID": 3, "FWD": 3},
    ),
    event_schemas.FormationTemplate(
        id="4-2-3-1", name="4-2-3-1 Defensive", description="4 Defenders, 2 DM, 3 AM, 1 Forward",
        positions={"DEF": 4, "MID": 5, "FWD": 1},
    ),
    event_schemas.FormationTemplate(
        id="3-5-2", name="3-5-2 Wing Play", description="3 Defenders, 5 Midfielders, 2 Forwards",
        positions={"DEF": 3, "MID": 5, "FWD": 2},
    ),
    event_schemas.FormationTemplate(
        id="5-3-2", name="5-3-2 Counter", description="5 Defenders, 3 Midfielders, 2 Forwards",
        positions={"DEF": 5, "MID": 3, "FWD": 2},
    ),
]


def get_formation_templates() -> List[event_schemas.FormationTemplate]:
    return list(FORMATION_TEMPLATES)


def get_event_or_404(db: Session, event_id: str) -> event_model.Event:
    db_event = db.query(event_model.Event).filter(event_model.Event.id == event_id).first()
    if not db_event:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    return db_event


def get_match_or_404(db: Session, match_id: str) -> event_model.Event:
    db_event = get_event_or_404(db, match_id)
    if db_event.type != "match":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Event is not a match")
    return db_event


def format_event_announcement(event: event_model.Event) -> str:
    """Chat text posted to the team when an event is scheduled."""
    event_date = event.start_time.strftime("%A, %B %d").replace(" 0", " ")
    event_time = event.start_time.strftime("%H:%M")

    text = f"New {event.type}\n\n{event.title}\n{event_date} at {event_time}\n{event.location}"
    if event.type == "match":
        text += f"\n{event.opponent}{' (Home)' if event.is_home_game else ' (Away)'}"
    if event.description:
        text += f"\n\n{event.description}"
    return text


def _validate_lineup(db: Session, team_id: str, formation: Optional[str], roster: List[event_schemas.RosterEntry]) -> None:
    if formation not in {template.id for template in FORMATION_TEMPLATES}:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unknown formation {formation}")

    team = team_service.get_team_or_404(db, team_id)
    team_players = set(team.players or [])

    seen = set()
    for entry in roster:
        if entry.id not in team_players:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=f"Player {entry.id} is not part of this team"
            )
        if entry.id in seen:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=f"Player {entry.id} appears twice in the roster"
            )
        seen.add(entry.id)

    if sum(1 for entry in roster if entry.is_starter) > MAX_STARTERS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=f"A lineup can have at most {MAX_STARTERS} starters"
        )


def create_event(db: Session, event_in: event_schemas.EventCreate, current_user: user_model.User) -> event_model.Event:
    team = team_service.get_team_or_404(db, event_in.team_id)
    team_service.ensure_team_trainer(team, current_user, "Only the team trainer can create events")

    if event_in.type == "match" and event_in.roster:
        _validate_lineup(db, team.id, event_in.formation, event_in.roster)

    db_event = event_model.Event(
        team_id=team.id,
        title=event_in.title,
        type=event_in.type,
        start_time=event_in.start_time,
        end_time=event_in.end_time,
        location=event_in.location,
        description=event_in.description,
        is_outdoor=event_in.is_outdoor,
        is_attendance_required=event_in.is_attendance_required,
        status="scheduled",
        opponent=event_in.opponent,
        is_home_game=event_in.is_home_game,
        formation=event_in.formation,
        roster=[entry.model_dump() for entry in event_in.roster],
        score_submitted=False,
        attendees=[],
        absentees=[],
        created_by=current_user.id,
    )
    db.add(db_event)
    db.commit()
    db.refresh(db_event)
    logger.info("Event %s (%s) created for team %s", db_event.id, db_event.type, team.id)

    chat_service.post_message(
        db,
        team.id,
        current_user,
        format_event_announcement(db_event),
        message_type="event",
        payload={
            "id": db_event.id,
            "type": db_event.type,
            "title": db_event.title,
            "start_time": db_event.start_time.isoformat(),
            "location": db_event.location,
            "formation": db_event.formation,
            "roster": db_event.roster,
            "opponent": db_event.opponent,
            "is_home_game": db_event.is_home_game,
        },
    )
    return db_event


def get_team_events(
    db: Session,
    team_id: str,
    current_user: user_model.User,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> List[event_model.Event]:
    team = team_service.get_team_or_404(db, team_id)
    team_service.ensure_team_member(team, current_user, "You are not a member of this team")

    query = db.query(event_model.Event).filter(event_model.Event.team_id == team_id)
    if start is not None and end is not None:
        query = query.filter(event_model.Event.start_time >= start, event_model.Event.start_time <= end)
    return query.order_by(event_model.Event.start_time.asc()).all()


def get_event(db: Session, event_id: str, current_user: user_model.User) -> event_model.Event:
    db_event = get_event_or_404(db, event_id)
    team = team_service.get_team_or_404(db, db_event.team_id)
    team_service.ensure_team_member(team, current_user, "You are not a member of this team")
    return db_event


def _ensure_can_manage(db: Session, db_event: event_model.Event, current_user: user_model.User, detail: str) -> None:
    if db_event.created_by == current_user.id:
        return
    team = team_service.get_team_or_404(db, db_event.team_id)
    team_service.ensure_team_trainer(team, current_user, detail)


def update_event(
    db: Session, event_id: str, event_update: event_schemas.EventUpdate, current_user: user_model.User
) -> event_model.Event:
    db_event = get_event_or_404(db, event_id)
    _ensure_can_manage(db, db_event, current_user, "Only the event creator or team trainer can update this event")

    update_data = event_update.model_dump(exclude_unset=True, exclude_none=True)

    start_time = update_data.get("start_time") or db_event.start_time
    end_time = update_data.get("end_time") or db_event.end_time
    if end_time <= start_time:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="End time must be after start time")

    opponent = update_data.get("opponent", db_event.opponent)
    if db_event.type == "match" and not (opponent or "").strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="A match requires an opponent")

    for key, value in update_data.items():
        setattr(db_event, key, value)

    db.commit()
    db.refresh(db_event)
    return db_event


def delete_event(db: Session, event_id: str, current_user: user_model.User) -> bool:
    db_event = get_event_or_404(db, event_id)
    _ensure_can_manage(db, db_event, current_user, "Only the event creator or team trainer can delete this event")

    db.delete(db_event)
    db.commit()
    logger.info("Event %s deleted by %s", event_id, current_user.id)
    return True


def update_match_lineup(
    db: Session, event_id: str, lineup: event_schemas.LineupUpdate, current_user: user_model.User
) -> event_model.Event:
    db_event = get_match_or_404(db, event_id)
    team = team_service.get_team_or_404(db, db_event.team_id)
    team_service.ensure_team_trainer(team, current_user, "Only the team trainer can set the lineup")

    _validate_lineup(db, team.id, lineup.formation, lineup.roster)

    db_event.formation = lineup.formation
    db_event.roster = [entry.model_dump() for entry in lineup.roster]
    db.commit()
    db.refresh(db_event)
    return db_event
