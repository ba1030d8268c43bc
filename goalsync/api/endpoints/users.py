from typing import Dict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from goalsync.services import auth_service, user_service, stats_service
from goalsync.models import user as user_model
from goalsync.schemas import user_schemas, stats_schemas
from goalsync.api.dependencies import get_db

router = APIRouter()


@router.get("/me", response_model=user_schemas.UserRead)
async def read_users_me(
    current_user: user_model.User = Depends(auth_service.get_current_user)
):
    return current_user


@router.patch("/me", response_model=user_schemas.UserRead)
async def update_profile_endpoint(
    profile_in: user_schemas.UserProfileUpdate,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return user_service.update_profile(db=db, current_user=current_user, profile_in=profile_in)


@router.post("/me/push-token", response_model=Dict[str, str])
async def save_push_token_endpoint(
    request: user_schemas.PushTokenRequest,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    user_service.save_push_token(db=db, current_user=current_user, token=request.token)
    return {"message": "Push token saved"}


@router.patch("/{user_id}/status", response_model=user_schemas.UserRead)
async def update_member_status_endpoint(
    user_id: str,
    status_in: user_schemas.MemberStatusUpdate,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return user_service.update_member_status(
        db=db, member_id=user_id, new_status=status_in.status, current_user=current_user
    )


@router.get("/{user_id}/stats", response_model=stats_schemas.PlayerStatsOverview)
async def get_player_stats_overview_endpoint(
    user_id: str,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return stats_service.get_player_stats_overview(db=db, player_id=user_id, current_user=current_user)


@router.get("/{user_id}/stats/totals", response_model=stats_schemas.PlayerSeasonTotals)
async def get_player_season_totals_endpoint(
    user_id: str,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return stats_service.get_player_season_totals(db=db, player_id=user_id, current_user=current_user)
