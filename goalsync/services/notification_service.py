import logging
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from goalsync.core.config import settings
from goalsync.models import notification as notification_model
from goalsync.models import user as user_model
from goalsync.schemas import notification_schemas

logger = logging.getLogger(__name__)


def create_notification(
    db: Session, notification_in: notification_schemas.NotificationCreate, commit: bool = True
) -> notification_model.Notification:
    db_notification = notification_model.Notification(
        user_id=notification_in.user_id,
        team_id=notification_in.team_id,
        type=notification_in.type,
        title=notification_in.title,
        message=notification_in.message,
        related_id=notification_in.related_id,
        read=False,
    )
    db.add(db_notification)
    if commit:
        db.commit()
        db.refresh(db_notification)
    logger.debug("Notification %s queued for user %s", notification_in.type, notification_in.user_id)
    return db_notification


def get_user_notifications(
    db: Session, user_id: str, current_user: user_model.User, limit: Optional[int] = None
) -> List[notification_model.Notification]:
    if user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You can only view your own notifications")

    return db.query(notification_model.Notification)\
        .filter(notification_model.Notification.user_id == user_id)\
        .order_by(notification_model.Notification.created_at.desc())\
        .limit(limit or settings.NOTIFICATION_LIMIT)\
        .all()


def _get_own_notification(db: Session, notification_id: str, current_user: user_model.User) -> notification_model.Notification:
    db_notification = db.query(notification_model.Notification).filter(
        notification_model.Notification.id == notification_id
    ).first()

    if not db_notification:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")

    if db_notification.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to access this notification")
    return db_notification


def mark_notification_as_read(db: Session, notification_id: str, current_user: user_model.User) -> notification_model.Notification:
    db_notification = _get_own_notification(db, notification_id, current_user)

    if not db_notification.read:
        db_notification.read = True
        db.commit()
        db.refresh(db_notification)

    return db_notification


def mark_all_user_notifications_as_read(db: Session, current_user: user_model.User) -> int:
    unread_notifications = db.query(notification_model.Notification).filter(
        notification_model.Notification.user_id == current_user.id,
        notification_model.Notification.read.is_(False),
    ).all()

    if not unread_notifications:
        return 0

    for notification in unread_notifications:
        notification.read = True
    db.commit()
    return len(unread_notifications)


def delete_notification(db: Session, notification_id: str, current_user: user_model.User) -> bool:
    db_notification = _get_own_notification(db, notification_id, current_user)
    db.delete(db_notification)
    db.commit()
    return True


def delete_match_notifications(db: Session, match_id: str, notification_type: str) -> int:
    """Delete every notification of ``notification_type`` about ``match_id``. Caller commits."""
    return db.query(notification_model.Notification).filter(
        notification_model.Notification.related_id == match_id,
        notification_model.Notification.type == notification_type,
    ).delete(synchronize_session=False)
