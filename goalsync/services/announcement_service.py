import logging
from typing import List

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from goalsync.models import announcement as announcement_model
from goalsync.models import user as user_model
from goalsync.schemas import announcement_schemas
from goalsync.services import chat_service, team_service

logger = logging.getLogger(__name__)


def _get_announcement_or_404(db: Session, announcement_id: str) -> announcement_model.Announcement:
    db_announcement = db.query(announcement_model.Announcement).filter(
        announcement_model.Announcement.id == announcement_id
    ).first()
    if not db_announcement:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Announcement not found")
    return db_announcement


def create_announcement(
    db: Session, announcement_in: announcement_schemas.AnnouncementCreate, current_user: user_model.User
) -> announcement_model.Announcement:
    if current_user.type != "trainer":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only trainers can create announcements")

    team = team_service.get_team_or_404(db, announcement_in.team_id)
    team_service.ensure_team_trainer(team, current_user, "You can only post announcements to your own team")

    db_announcement = announcement_model.Announcement(
        team_id=team.id,
        title=announcement_in.title,
        message=announcement_in.message,
        priority=announcement_in.priority,
        created_by=current_user.id,
        read_by=[],
    )
    db.add(db_announcement)
    db.commit()
    db.refresh(db_announcement)
    logger.info("Announcement %s posted to team %s", db_announcement.id, team.id)

    chat_service.post_message(
        db,
        team.id,
        current_user,
        f"📢 {db_announcement.title}\n\n{db_announcement.message}",
        message_type="announcement",
        payload={
            "id": db_announcement.id,
            "title": db_announcement.title,
            "message": db_announcement.message,
            "priority": db_announcement.priority,
        },
    )
    return db_announcement


def get_team_announcements(db: Session, team_id: str, current_user: user_model.User) -> List[announcement_model.Announcement]:
    team = team_service.get_team_or_404(db, team_id)
    team_service.ensure_team_member(team, current_user, "You are not a member of this team")

    return db.query(announcement_model.Announcement)\
        .filter(announcement_model.Announcement.team_id == team_id)\
        .order_by(announcement_model.Announcement.created_at.desc())\
        .all()


def mark_announcement_as_read(
    db: Session, announcement_id: str, current_user: user_model.User
) -> announcement_model.Announcement:
    db_announcement = _get_announcement_or_404(db, announcement_id)

    if current_user.team_id != db_announcement.team_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You are not a member of this team")

    if current_user.id not in (db_announcement.read_by or []):
        db_announcement.read_by = list(db_announcement.read_by or []) + [current_user.id]
        db.commit()
        db.refresh(db_announcement)
    return db_announcement


def delete_announcement(db: Session, announcement_id: str, current_user: user_model.User) -> bool:
    db_announcement = _get_announcement_or_404(db, announcement_id)
    team = team_service.get_team_or_404(db, db_announcement.team_id)
    team_service.ensure_team_trainer(team, current_user, "Only the team trainer can delete announcements")

    db.delete(db_announcement)
    db.commit()
    return True
