import logging
import math
from typing import List

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from goalsync.models import event as event_model
from goalsync.models import user as user_model
from goalsync.schemas import attendance_schemas, event_schemas
from goalsync.services import event_service, team_service

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero (12.5 -> 13)."""
    return math.floor(value + 0.5)


def attendance_percentage(present: int, total: int) -> int:
    if total == 0:
        return 0
    return round_half_up(present / total * 100)


def has_marked_attendance(event: event_model.Event) -> bool:
    return bool(event.attendees) or bool(event.absentees)


def update_event_attendance(
    db: Session, event_id: str, user_id: str, is_attending: bool, current_user: user_model.User
) -> event_model.Event:
    db_event = event_service.get_event_or_404(db, event_id)
    team = team_service.get_team_or_404(db, db_event.team_id)

    if team.trainer_id == current_user.id:
        if user_id not in (team.players or []):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Player is not part of this team")
    elif user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You can only mark your own attendance")
    else:
        team_service.ensure_team_member(team, current_user, "You are not a member of this team")

    attendees = [uid for uid in (db_event.attendees or []) if uid != user_id]
    absentees = [uid for uid in (db_event.absentees or []) if uid != user_id]
    if is_attending:
        attendees.append(user_id)
    else:
        absentees.append(user_id)

    db_event.attendees = attendees
    db_event.absentees = absentees
    db.commit()
    db.refresh(db_event)
    logger.info("Attendance for %s on %s set to %s", user_id, event_id, "present" if is_attending else "absent")
    return db_event


def get_event_attendance_status(db: Session, event_id: str) -> event_schemas.AttendanceStatus:
    db_event = event_service.get_event_or_404(db, event_id)
    return event_schemas.AttendanceStatus(event_id=db_event.id, has_marked_attendance=has_marked_attendance(db_event))


def _marked_events(db: Session, team_id: str) -> List[event_model.Event]:
    events = db.query(event_model.Event)\
        .filter(event_model.Event.team_id == team_id)\
        .order_by(event_model.Event.start_time.desc())\
        .all()
    return [event for event in events if has_marked_attendance(event)]


def get_team_attendance_stats(
    db: Session, team_id: str, current_user: user_model.User
) -> attendance_schemas.TeamAttendanceStats:
    """
    Attendance summary for every player of the team.

    Only events where attendance has been taken count. A player's total is the
    number of those events where they are marked either way, so players who
    joined late are not penalized for earlier sessions.
    """
    team = team_service.get_team_or_404(db, team_id)
    team_service.ensure_team_member(team, current_user, "You are not a member of this team")

    events = _marked_events(db, team_id)
    players = [m for m in team_service.get_team_members(db, team_id) if m.role == "player"]

    player_stats = []
    for player in players:
        present = sum(1 for e in events if player.id in (e.attendees or []))
        absent = sum(1 for e in events if player.id in (e.absentees or []))
        total = present + absent
        player_stats.append(attendance_schemas.PlayerAttendanceStats(
            id=player.id,
            name=player.name,
            number=player.number or "",
            position=player.position or "Unassigned",
            attendance=attendance_schemas.PlayerAttendance(present=present, total=total),
            percentage=attendance_percentage(present, total),
        ))

    player_stats.sort(key=lambda s: s.percentage, reverse=True)

    rated = [s.percentage for s in player_stats if s.attendance.total > 0]
    team_average = round_half_up(sum(rated) / len(rated)) if rated else 0

    return attendance_schemas.TeamAttendanceStats(
        total_events=len(events),
        team_average=team_average,
        player_stats=player_stats,
    )


def get_player_attendance_history(
    db: Session, team_id: str, player_id: str, current_user: user_model.User
) -> attendance_schemas.PlayerAttendanceHistory:
    team = team_service.get_team_or_404(db, team_id)
    if current_user.id != player_id:
        team_service.ensure_team_trainer(team, current_user, "Only the player or the team trainer can view this history")
    else:
        team_service.ensure_team_member(team, current_user, "You are not a member of this team")

    entries = []
    present = total = 0
    last_event_at = None
    for event in _marked_events(db, team_id):
        if player_id in (event.attendees or []):
            event_status = "present"
            present += 1
        elif player_id in (event.absentees or []):
            event_status = "absent"
        else:
            event_status = "unmarked"

        if event_status != "unmarked":
            total += 1
            if last_event_at is None:
                last_event_at = event.start_time

        entries.append(attendance_schemas.AttendanceHistoryEntry(
            event_id=event.id,
            title=event.title,
            type=event.type,
            start_time=event.start_time,
            status=event_status,
        ))

    return attendance_schemas.PlayerAttendanceHistory(
        player_id=player_id,
        present=present,
        total=total,
        percentage=attendance_percentage(present, total),
        events=entries,
        last_event_at=last_event_at,
    )
