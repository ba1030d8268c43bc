from typing import Dict, List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from goalsync.services import attendance_service, auth_service, event_service
from goalsync.models import user as user_model
from goalsync.schemas import event_schemas
from goalsync.api.dependencies import get_db

router = APIRouter()


@router.get("/formations", response_model=List[event_schemas.FormationTemplate])
async def get_formation_templates_endpoint():
    return event_service.get_formation_templates()


@router.post("/", response_model=event_schemas.EventRead, status_code=status.HTTP_201_CREATED)
async def create_event_endpoint(
    event_in: event_schemas.EventCreate,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return event_service.create_event(db=db, event_in=event_in, current_user=current_user)


@router.get("/{event_id}", response_model=event_schemas.EventRead)
async def get_event_endpoint(
    event_id: str,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return event_service.get_event(db=db, event_id=event_id, current_user=current_user)


@router.patch("/{event_id}", response_model=event_schemas.EventRead)
async def update_event_endpoint(
    event_id: str,
    event_in: event_schemas.EventUpdate,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return event_service.update_event(db=db, event_id=event_id, event_update=event_in, current_user=current_user)


@router.delete("/{event_id}", response_model=Dict[str, str])
async def delete_event_endpoint(
    event_id: str,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    event_service.delete_event(db=db, event_id=event_id, current_user=current_user)
    return {"message": "Event deleted successfully"}


@router.put("/{event_id}/lineup", response_model=event_schemas.EventRead)
async def update_match_lineup_endpoint(
    event_id: str,
    lineup: event_schemas.LineupUpdate,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return event_service.update_match_lineup(db=db, event_id=event_id, lineup=lineup, current_user=current_user)


@router.put("/{event_id}/attendance", response_model=event_schemas.EventRead)
async def update_event_attendance_endpoint(
    event_id: str,
    attendance_in: event_schemas.AttendanceUpdate,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return attendance_service.update_event_attendance(
        db=db,
        event_id=event_id,
        user_id=attendance_in.user_id,
        is_attending=attendance_in.is_attending,
        current_user=current_user,
    )


@router.get("/{event_id}/attendance", response_model=event_schemas.AttendanceStatus)
async def get_event_attendance_status_endpoint(
    event_id: str,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return attendance_service.get_event_attendance_status(db=db, event_id=event_id)
