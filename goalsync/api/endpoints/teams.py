from datetime import datetime
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from goalsync.services import (
    announcement_service,
    attendance_service,
    auth_service,
    event_service,
    invitation_service,
    stats_service,
    team_service,
)
from goalsync.models import user as user_model
from goalsync.schemas import (
    announcement_schemas,
    attendance_schemas,
    event_schemas,
    invitation_schemas,
    stats_schemas,
    team_schemas,
)
from goalsync.api.dependencies import get_db

router = APIRouter()


@router.post("/", response_model=team_schemas.TeamRead, status_code=status.HTTP_201_CREATED)
async def create_team_endpoint(
    team_in: team_schemas.TeamCreate,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return team_service.create_team(db=db, team_in=team_in, trainer=current_user)


@router.get("/mine", response_model=team_schemas.TeamRead)
async def get_my_team_endpoint(
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    team = None
    if current_user.team_id:
        team = team_service.get_team(db, current_user.team_id)
    if not team and current_user.type == "trainer":
        team = team_service.get_team_by_trainer(db, current_user)
    if not team:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="You are not part of a team")
    return team


@router.post("/fix-association", response_model=Dict[str, str])
async def fix_trainer_team_association_endpoint(
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    team_id = team_service.fix_trainer_team_association(db=db, trainer=current_user)
    return {"team_id": team_id}


@router.get("/{team_id}", response_model=team_schemas.TeamRead)
async def get_team_endpoint(
    team_id: str,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    team = team_service.get_team_or_404(db, team_id)
    team_service.ensure_team_member(team, current_user, "You are not a member of this team")
    return team


@router.patch("/{team_id}/name", response_model=team_schemas.TeamRead)
async def update_team_name_endpoint(
    team_id: str,
    name_in: team_schemas.TeamNameUpdate,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return team_service.update_team_name(db=db, team_id=team_id, new_name=name_in.name, current_user=current_user)


@router.patch("/{team_id}/settings", response_model=team_schemas.TeamRead)
async def update_team_settings_endpoint(
    team_id: str,
    settings_in: team_schemas.TeamSettingsUpdate,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return team_service.update_team_settings(db=db, team_id=team_id, settings_in=settings_in, current_user=current_user)


@router.delete("/{team_id}", response_model=Dict[str, str])
async def delete_team_endpoint(
    team_id: str,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    team_service.delete_team(db=db, team_id=team_id, current_user=current_user)
    return {"message": "Team deleted successfully"}


@router.post("/{team_id}/join", response_model=team_schemas.TeamRead)
async def join_team_endpoint(
    team_id: str,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return team_service.join_team(db=db, team_id=team_id, current_user=current_user)


@router.get("/{team_id}/members", response_model=List[team_schemas.TeamMember])
async def get_team_members_endpoint(
    team_id: str,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    team = team_service.get_team_or_404(db, team_id)
    team_service.ensure_team_member(team, current_user, "You are not a member of this team")
    return team_service.get_team_members(db=db, team_id=team_id)


@router.delete("/{team_id}/players/{player_id}", response_model=team_schemas.TeamRead)
async def remove_player_endpoint(
    team_id: str,
    player_id: str,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return team_service.remove_player(db=db, team_id=team_id, player_id=player_id, current_user=current_user)


@router.get("/{team_id}/injury-warnings", response_model=List[team_schemas.InjuredPlayerInMatch])
async def get_injury_warnings_endpoint(
    team_id: str,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return team_service.get_injured_players_in_upcoming_matches(db=db, team_id=team_id, current_user=current_user)


@router.post(
    "/{team_id}/invitations",
    response_model=invitation_schemas.InvitationRead,
    status_code=status.HTTP_201_CREATED,
)
async def invite_player_endpoint(
    team_id: str,
    invitation_in: invitation_schemas.InvitationCreate,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return invitation_service.invite_player(db=db, team_id=team_id, invitation_in=invitation_in, current_user=current_user)


@router.get("/{team_id}/events", response_model=List[event_schemas.EventRead])
async def get_team_events_endpoint(
    team_id: str,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return event_service.get_team_events(
        db=db,
        team_id=team_id,
        current_user=current_user,
        start=event_schemas.to_naive_utc(start),
        end=event_schemas.to_naive_utc(end),
    )


@router.get("/{team_id}/attendance", response_model=attendance_schemas.TeamAttendanceStats)
async def get_team_attendance_stats_endpoint(
    team_id: str,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return attendance_service.get_team_attendance_stats(db=db, team_id=team_id, current_user=current_user)


@router.get("/{team_id}/attendance/{player_id}", response_model=attendance_schemas.PlayerAttendanceHistory)
async def get_player_attendance_history_endpoint(
    team_id: str,
    player_id: str,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return attendance_service.get_player_attendance_history(
        db=db, team_id=team_id, player_id=player_id, current_user=current_user
    )


@router.get("/{team_id}/announcements", response_model=List[announcement_schemas.AnnouncementRead])
async def get_team_announcements_endpoint(
    team_id: str,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return announcement_service.get_team_announcements(db=db, team_id=team_id, current_user=current_user)


@router.get("/{team_id}/stats/pending-matches", response_model=List[event_schemas.EventRead])
async def get_pending_match_stats_endpoint(
    team_id: str,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return stats_service.get_pending_match_stats(db=db, team_id=team_id, current_user=current_user)


@router.get("/{team_id}/stats/pending-players", response_model=List[stats_schemas.PendingPlayerStatsRead])
async def get_pending_player_stats_endpoint(
    team_id: str,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return stats_service.get_pending_player_stats(db=db, team_id=team_id, current_user=current_user)


@router.post("/{team_id}/stats/score-reminders", response_model=Dict[str, int])
async def check_match_score_notifications_endpoint(
    team_id: str,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    created = stats_service.check_and_create_match_score_notifications(db=db, team_id=team_id, current_user=current_user)
    return {"created": created}


@router.delete("/{team_id}/matches/{match_id}/score-requirement", response_model=stats_schemas.MatchStatsRead)
async def delete_match_score_requirement_endpoint(
    team_id: str,
    match_id: str,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return stats_service.delete_match_score_requirement(
        db=db, team_id=team_id, match_id=match_id, current_user=current_user
    )
