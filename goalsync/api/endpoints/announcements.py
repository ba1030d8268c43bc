from typing import Dict

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from goalsync.services import announcement_service, auth_service
from goalsync.models import user as user_model
from goalsync.schemas import announcement_schemas
from goalsync.api.dependencies import get_db

router = APIRouter()


@router.post("/", response_model=announcement_schemas.AnnouncementRead, status_code=status.HTTP_201_CREATED)
async def create_announcement_endpoint(
    announcement_in: announcement_schemas.AnnouncementCreate,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return announcement_service.create_announcement(db=db, announcement_in=announcement_in, current_user=current_user)


@router.post("/{announcement_id}/read", response_model=announcement_schemas.AnnouncementRead)
async def mark_announcement_as_read_endpoint(
    announcement_id: str,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return announcement_service.mark_announcement_as_read(
        db=db, announcement_id=announcement_id, current_user=current_user
    )


@router.delete("/{announcement_id}", response_model=Dict[str, str])
async def delete_announcement_endpoint(
    announcement_id: str,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    announcement_service.delete_announcement(db=db, announcement_id=announcement_id, current_user=current_user)
    return {"message": "Announcement deleted successfully"}
