from typing import Dict, List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from goalsync.services import notification_service, auth_service
from goalsync.models import user as user_model
from goalsync.schemas import notification_schemas
from goalsync.api.dependencies import get_db

router = APIRouter()


@router.get("/", response_model=List[notification_schemas.NotificationRead])
async def get_user_notifications_endpoint(
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return notification_service.get_user_notifications(db=db, user_id=current_user.id, current_user=current_user)


@router.patch("/{notification_id}/read", response_model=notification_schemas.NotificationRead)
async def mark_notification_as_read_endpoint(
    notification_id: str,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return notification_service.mark_notification_as_read(
        db=db, notification_id=notification_id, current_user=current_user
    )


@router.post("/read-all", response_model=Dict[str, int])
async def mark_all_user_notifications_as_read_endpoint(
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    updated = notification_service.mark_all_user_notifications_as_read(db=db, current_user=current_user)
    return {"updated": updated}


@router.delete("/{notification_id}", response_model=Dict[str, str])
async def delete_notification_endpoint(
    notification_id: str,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    notification_service.delete_notification(db=db, notification_id=notification_id, current_user=current_user)
    return {"message": "Notification deleted successfully"}
