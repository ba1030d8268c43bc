import logging
from typing import Dict, List, Optional

from fastapi import HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from goalsync.core.database import utcnow
from goalsync.models import event as event_model
from goalsync.models import match_stats as match_stats_model
from goalsync.models import notification as notification_model
from goalsync.models import player_match_stats as player_stats_model
from goalsync.models import team as team_model
from goalsync.models import user as user_model
from goalsync.schemas import notification_schemas, stats_schemas
from goalsync.services import attendance_service, event_service, notification_service, team_service

logger = logging.getLogger(__name__)

SYSTEM_RELEASE = "system"
SKIP_TECHNICAL_ISSUE = "technical_issue"


def _notify(
    db: Session, user_id: str, team_id: Optional[str], notification_type: str, title: str, message: str, related_id: str
) -> None:
    notification_service.create_notification(
        db,
        notification_schemas.NotificationCreate(
            user_id=user_id,
            team_id=team_id,
            type=notification_type,
            title=title,
            message=message,
            related_id=related_id,
        ),
        commit=False,
    )


def _match_and_team(db: Session, match_id: str):
    match = event_service.get_match_or_404(db, match_id)
    team = team_service.get_team_or_404(db, match.team_id)
    return match, team


def _get_player_stats_or_404(db: Session, stats_id: str) -> player_stats_model.PlayerMatchStats:
    record = db.query(player_stats_model.PlayerMatchStats).filter(
        player_stats_model.PlayerMatchStats.id == stats_id
    ).first()
    if not record:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Player stats not found")
    return record


def get_match_stats_record(db: Session, match_id: str) -> Optional[match_stats_model.MatchStats]:
    return db.query(match_stats_model.MatchStats).filter(match_stats_model.MatchStats.id == match_id).first()


def _match_records(db: Session, match_id: str) -> List[player_stats_model.PlayerMatchStats]:
    return db.query(player_stats_model.PlayerMatchStats).filter(
        player_stats_model.PlayerMatchStats.match_id == match_id
    ).all()


# --- Player statistics -------------------------------------------------------

def submit_player_stats(
    db: Session, match_id: str, submission: stats_schemas.PlayerStatsSubmit, current_user: user_model.User
) -> player_stats_model.PlayerMatchStats:
    """
    Record one player's statistics for a match.

    Players submit for themselves and only for matches they attended; the
    record then waits for the trainer's review. The trainer may submit for any
    attendee, in which case the record is approved straight away.
    """
    match, team = _match_and_team(db, match_id)
    attendees = match.attendees or []
    submitted_by_trainer = team.trainer_id == current_user.id

    if submitted_by_trainer:
        player_id = submission.player_id
        if not player_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="player_id is required")
        if player_id not in attendees:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Player did not attend this match")
    else:
        player_id = current_user.id
        if submission.player_id and submission.player_id != current_user.id:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You can only submit your own stats")
        if current_user.team_id != match.team_id:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You are not a member of this team")
        if current_user.id not in attendees:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail="Only players who attended the match can submit stats"
            )

    existing = db.query(player_stats_model.PlayerMatchStats).filter(
        player_stats_model.PlayerMatchStats.match_id == match_id,
        player_stats_model.PlayerMatchStats.player_id == player_id,
    ).first()
    if existing:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Stats already submitted for this match")

    record = player_stats_model.PlayerMatchStats(
        match_id=match_id,
        player_id=player_id,
        stats=submission.stats.model_dump(),
        status="pending",
        submitted_at=utcnow(),
    )
    if submitted_by_trainer:
        record.status = "approved"
        record.reviewed_at = utcnow()
        record.reviewed_by = current_user.id
    db.add(record)
    db.flush()

    if not submitted_by_trainer:
        _notify(
            db, team.trainer_id, team.id, "approval_needed",
            "Stats Approval Needed",
            f"{current_user.name} submitted stats for {match.title}",
            record.id,
        )

    db.commit()
    db.refresh(record)
    logger.info("Stats %s submitted for player %s in match %s", record.id, player_id, match_id)

    if submitted_by_trainer:
        check_and_release_match_stats(db, match_id)
    return record


def update_player_stats(
    db: Session, stats_id: str, update: stats_schemas.PlayerStatsUpdate, current_user: user_model.User
) -> player_stats_model.PlayerMatchStats:
    record = _get_player_stats_or_404(db, stats_id)
    match, team = _match_and_team(db, record.match_id)

    if team.trainer_id != current_user.id:
        if record.player_id != current_user.id:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You can only edit your own stats")
        if record.status == "approved":
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Approved stats can no longer be edited")
        if record.status == "rejected":
            record.status = "pending"
            _notify(
                db, team.trainer_id, team.id, "approval_needed",
                "Stats Approval Needed",
                f"{current_user.name} resubmitted stats for {match.title}",
                record.id,
            )

    record.stats = update.stats.model_dump()
    record.updated_at = utcnow()
    db.commit()
    db.refresh(record)
    return record


def review_player_stats(
    db: Session, stats_id: str, review: stats_schemas.PlayerStatsReview, current_user: user_model.User
) -> player_stats_model.PlayerMatchStats:
    record = _get_player_stats_or_404(db, stats_id)
    match, team = _match_and_team(db, record.match_id)
    team_service.ensure_team_trainer(team, current_user, "Only the team trainer can review stats")

    record.status = "approved" if review.approved else "rejected"
    record.reviewed_at = utcnow()
    record.reviewed_by = current_user.id
    record.comments = review.comments

    if review.approved:
        _notify(
            db, record.player_id, team.id, "stats_approved",
            "Stats Approved", f"Your stats for {match.title} were approved", match.id,
        )
    else:
        message = f"Your stats for {match.title} were rejected"
        if review.comments:
            message += f": {review.comments}"
        _notify(db, record.player_id, team.id, "stats_rejected", "Stats Rejected", message, match.id)

    db.commit()
    db.refresh(record)
    logger.info("Stats %s %s by %s", stats_id, record.status, current_user.id)

    if review.approved:
        check_and_release_match_stats(db, match.id)
    return record


# --- Match score and release -------------------------------------------------

def _release_match_stats(
    db: Session, db_stats: match_stats_model.MatchStats, match: event_model.Event, team: team_model.Team, released_by: str
) -> None:
    """Make the match stats public and tell the whole team. Caller commits."""
    db_stats.visibility = "public"
    db_stats.released_at = utcnow()
    db_stats.released_by = released_by

    recipients = list(team.players or [])
    if team.trainer_id not in recipients:
        recipients.append(team.trainer_id)
    for user_id in recipients:
        _notify(
            db, user_id, team.id, "stats_released",
            "Match Stats Released", f"Stats for {match.title} are now available", match.id,
        )
    logger.info("Stats for match %s released to %d users", match.id, len(recipients))


def submit_match_score(
    db: Session, match_id: str, score_in: stats_schemas.MatchScoreSubmit, current_user: user_model.User
) -> match_stats_model.MatchStats:
    match, team = _match_and_team(db, match_id)
    team_service.ensure_team_trainer(team, current_user, "Only the team trainer can submit the match score")

    db_stats = get_match_stats_record(db, match_id)
    if not db_stats:
        db_stats = match_stats_model.MatchStats(
            id=match_id, team_id=team.id, visibility="private", is_complete=False
        )
        db.add(db_stats)

    db_stats.home_score = score_in.home_score
    db_stats.away_score = score_in.away_score
    db_stats.possession = score_in.possession
    db_stats.status = score_in.status
    db_stats.submitted_by = current_user.id
    db_stats.submitted_at = utcnow()

    match.score_submitted = True

    if score_in.status == "final":
        notification_service.delete_match_notifications(db, match_id, "stats_needed")

    db.commit()
    db.refresh(db_stats)
    logger.info("Score %s-%s (%s) submitted for match %s", score_in.home_score, score_in.away_score,
                score_in.status, match_id)

    check_and_release_match_stats(db, match_id)
    db.refresh(db_stats)
    return db_stats


def is_match_stats_complete(match: event_model.Event, records: List[player_stats_model.PlayerMatchStats]) -> bool:
    attendees = match.attendees or []
    if not attendees:
        return False
    if any(r.status in ("pending", "rejected") for r in records):
        return False
    approved = {r.player_id for r in records if r.status == "approved"}
    return all(player_id in approved for player_id in attendees)


def check_and_release_match_stats(db: Session, match_id: str) -> bool:
    """
    Store whether every attendee's stats are approved and, the first time that
    holds, publish the match stats. Returns True when this call released them.
    """
    match = db.query(event_model.Event).filter(event_model.Event.id == match_id).first()
    db_stats = get_match_stats_record(db, match_id)
    if not match or not db_stats:
        return False

    complete = is_match_stats_complete(match, _match_records(db, match_id))
    db_stats.is_complete = complete

    released = False
    if complete and db_stats.visibility == "private":
        team = team_service.get_team_or_404(db, match.team_id)
        _release_match_stats(db, db_stats, match, team, SYSTEM_RELEASE)
        released = True

    db.commit()
    return released


def set_match_stats_visibility(
    db: Session, match_id: str, visibility: str, current_user: user_model.User
) -> match_stats_model.MatchStats:
    match, team = _match_and_team(db, match_id)
    team_service.ensure_team_trainer(team, current_user, "Only the team trainer can change stats visibility")

    db_stats = get_match_stats_record(db, match_id)
    if not db_stats:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Match stats not found")

    if visibility == "public" and db_stats.visibility != "public":
        _release_match_stats(db, db_stats, match, team, current_user.id)
    elif visibility == "private":
        db_stats.visibility = "private"

    db.commit()
    db.refresh(db_stats)
    return db_stats


# --- Reading ---------------------------------------------------------------------

def get_match_stats(db: Session, match_id: str, current_user: user_model.User) -> match_stats_model.MatchStats:
    match, team = _match_and_team(db, match_id)
    team_service.ensure_team_member(team, current_user, "You are not a member of this team")

    db_stats = get_match_stats_record(db, match_id)
    if not db_stats:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Match stats not found")

    if team.trainer_id != current_user.id and db_stats.visibility != "public":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Match stats have not been released yet")
    return db_stats


def get_match_player_stats(
    db: Session, match_id: str, current_user: user_model.User
) -> List[player_stats_model.PlayerMatchStats]:
    match, team = _match_and_team(db, match_id)
    team_service.ensure_team_member(team, current_user, "You are not a member of this team")

    records = _match_records(db, match_id)
    if team.trainer_id == current_user.id:
        return records

    db_stats = get_match_stats_record(db, match_id)
    is_public = db_stats is not None and db_stats.visibility == "public"
    return [
        r for r in records
        if r.player_id == current_user.id or (is_public and r.status == "approved")
    ]


def get_match_stats_summary(db: Session, match_id: str, current_user: user_model.User) -> stats_schemas.MatchStatsSummary:
    match, team = _match_and_team(db, match_id)
    team_service.ensure_team_member(team, current_user, "You are not a member of this team")

    if team.trainer_id != current_user.id:
        db_stats = get_match_stats_record(db, match_id)
        if not db_stats or db_stats.visibility != "public":
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Match stats have not been released yet")

    approved = [r.stats or {} for r in _match_records(db, match_id) if r.status == "approved"]
    minutes = [s.get("minutes_played") or 0 for s in approved]

    return stats_schemas.MatchStatsSummary(
        match_id=match_id,
        players=len(approved),
        total_goals=sum(s.get("goals") or 0 for s in approved),
        total_assists=sum(s.get("assists") or 0 for s in approved),
        total_shots_on_target=sum(s.get("shots_on_target") or 0 for s in approved),
        total_yellow_cards=sum(s.get("yellow_cards") or 0 for s in approved),
        total_red_cards=sum(s.get("red_cards") or 0 for s in approved),
        avg_minutes_played=attendance_service.round_half_up(sum(minutes) / len(minutes)) if minutes else 0,
    )


def get_pending_match_stats(db: Session, team_id: str, current_user: user_model.User) -> List[event_model.Event]:
    """Matches that are over but still have no final score."""
    team = team_service.get_team_or_404(db, team_id)
    team_service.ensure_team_trainer(team, current_user, "Only the team trainer can view pending match stats")

    now = utcnow()
    matches = db.query(event_model.Event)\
        .filter(event_model.Event.team_id == team_id, event_model.Event.type == "match")\
        .order_by(event_model.Event.start_time.desc())\
        .all()

    pending = []
    seen = set()
    for match in matches:
        if match.id in seen or match.status == "cancelled":
            continue
        if match.status != "completed" and match.end_time >= now:
            continue
        db_stats = get_match_stats_record(db, match.id)
        if db_stats and db_stats.status == "final":
            continue
        seen.add(match.id)
        pending.append(match)
    return pending


def get_pending_player_stats(
    db: Session, team_id: str, current_user: user_model.User
) -> List[stats_schemas.PendingPlayerStatsRead]:
    team = team_service.get_team_or_404(db, team_id)
    team_service.ensure_team_trainer(team, current_user, "Only the team trainer can review stats")

    matches: Dict[str, event_model.Event] = {
        m.id: m for m in db.query(event_model.Event).filter(
            event_model.Event.team_id == team_id, event_model.Event.type == "match"
        ).all()
    }
    if not matches:
        return []

    records = db.query(player_stats_model.PlayerMatchStats).filter(
        player_stats_model.PlayerMatchStats.match_id.in_(list(matches)),
        player_stats_model.PlayerMatchStats.status == "pending",
    ).order_by(player_stats_model.PlayerMatchStats.submitted_at.desc()).all()

    player_ids = {r.player_id for r in records}
    players = {
        u.id: u for u in db.query(user_model.User).filter(user_model.User.id.in_(player_ids)).all()
    } if player_ids else {}

    result = []
    for record in records:
        match = matches.get(record.match_id)
        player = players.get(record.player_id)
        result.append(stats_schemas.PendingPlayerStatsRead(
            **stats_schemas.PlayerMatchStatsRead.model_validate(record).model_dump(),
            match_title=match.title if match else "Unknown Match",
            match_date=match.start_time if match else None,
            player_name=player.name if player else "Unknown Player",
        ))
    return result


def _ensure_can_view_player(db: Session, player_id: str, current_user: user_model.User) -> user_model.User:
    player = db.query(user_model.User).filter(user_model.User.id == player_id).first()
    if not player:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Player not found")
    if player.id == current_user.id:
        return player

    team = team_service.get_team(db, player.team_id) if player.team_id else None
    if not team or team.trainer_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to view this player's stats")
    return player


def get_player_stats_overview(db: Session, player_id: str, current_user: user_model.User) -> stats_schemas.PlayerStatsOverview:
    player = _ensure_can_view_player(db, player_id, current_user)

    records = db.query(player_stats_model.PlayerMatchStats)\
        .filter(player_stats_model.PlayerMatchStats.player_id == player.id)\
        .order_by(player_stats_model.PlayerMatchStats.submitted_at.desc())\
        .all()

    match_ids = {r.match_id for r in records}
    matches = {
        m.id: m for m in db.query(event_model.Event).filter(event_model.Event.id.in_(match_ids)).all()
    } if match_ids else {}

    overview = {"pending": [], "approved": [], "rejected": []}
    for record in records:
        match = matches.get(record.match_id)
        overview.setdefault(record.status, []).append(stats_schemas.PlayerStatsWithMatch(
            **stats_schemas.PlayerMatchStatsRead.model_validate(record).model_dump(),
            match_title=match.title if match else "Unknown Match",
            match_date=match.start_time if match else None,
            opponent=(match.opponent or "") if match else "",
        ))

    needs_submission = []
    if player.team_id:
        completed = db.query(event_model.Event).filter(
            event_model.Event.team_id == player.team_id,
            event_model.Event.type == "match",
            event_model.Event.status == "completed",
        ).order_by(event_model.Event.start_time.desc()).all()
        for match in completed:
            on_roster = any(entry.get("id") == player.id for entry in (match.roster or []))
            if on_roster and match.id not in match_ids:
                needs_submission.append(stats_schemas.MatchNeedingStats(
                    id=match.id,
                    match_title=match.title,
                    match_date=match.start_time,
                    opponent=match.opponent or "",
                ))

    return stats_schemas.PlayerStatsOverview(
        pending_approval=overview["pending"],
        approved=overview["approved"],
        rejected=overview["rejected"],
        needs_submission=needs_submission,
    )


def get_player_season_totals(db: Session, player_id: str, current_user: user_model.User) -> stats_schemas.PlayerSeasonTotals:
    _ensure_can_view_player(db, player_id, current_user)

    approved = [
        r.stats or {} for r in db.query(player_stats_model.PlayerMatchStats).filter(
            player_stats_model.PlayerMatchStats.player_id == player_id,
            player_stats_model.PlayerMatchStats.status == "approved",
        ).all()
    ]

    def total(key: str) -> int:
        return sum(s.get(key) or 0 for s in approved)

    return stats_schemas.PlayerSeasonTotals(
        player_id=player_id,
        matches=len(approved),
        goals=total("goals"),
        assists=total("assists"),
        yellow_cards=total("yellow_cards"),
        red_cards=total("red_cards"),
        minutes_played=total("minutes_played"),
        shots_on_target=total("shots_on_target"),
        saves=total("saves"),
        clean_sheets=sum(1 for s in approved if s.get("clean_sheet")),
    )


# --- Score reminders -------------------------------------------------------------

def delete_match_score_requirement(
    db: Session, team_id: str, match_id: str, current_user: user_model.User
) -> match_stats_model.MatchStats:
    """Close a match's score requirement without a score, e.g. after a technical issue."""
    team = team_service.get_team_or_404(db, team_id)
    team_service.ensure_team_trainer(team, current_user, "Only the team trainer can skip the match score")

    match = event_service.get_match_or_404(db, match_id)
    if match.team_id != team_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Match not found in this team")

    db_stats = get_match_stats_record(db, match_id)
    if not db_stats:
        db_stats = match_stats_model.MatchStats(id=match_id, team_id=team_id, visibility="private", is_complete=False)
        db.add(db_stats)

    db_stats.status = "final"
    db_stats.skip_reason = SKIP_TECHNICAL_ISSUE
    db_stats.skip_reason_note = "Score skipped by the trainer"
    db_stats.submitted_by = current_user.id
    db_stats.submitted_at = utcnow()

    match.score_submitted = True
    notification_service.delete_match_notifications(db, match_id, "stats_needed")

    db.commit()
    db.refresh(db_stats)
    logger.info("Score requirement for match %s skipped by %s", match_id, current_user.id)
    return db_stats


def check_and_create_match_score_notifications(db: Session, team_id: str, current_user: user_model.User) -> int:
    team = team_service.get_team(db, team_id)
    if not team or team.trainer_id != current_user.id:
        return 0

    ended = db.query(event_model.Event).filter(
        event_model.Event.team_id == team_id,
        event_model.Event.type == "match",
        event_model.Event.end_time < utcnow(),
        or_(event_model.Event.score_submitted.is_(False), event_model.Event.score_submitted.is_(None)),
        event_model.Event.status != "cancelled",
    ).all()

    created = 0
    for match in ended:
        exists = db.query(notification_model.Notification).filter(
            notification_model.Notification.user_id == team.trainer_id,
            notification_model.Notification.type == "stats_needed",
            notification_model.Notification.related_id == match.id,
        ).first()
        if exists:
            continue
        _notify(
            db, team.trainer_id, team.id, "stats_needed",
            "Match Score Needed", f"Please submit the score for {match.title}", match.id,
        )
        created += 1

    if created:
        db.commit()
    return created
