from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from goalsync.services import auth_service, stats_service
from goalsync.models import user as user_model
from goalsync.schemas import stats_schemas
from goalsync.api.dependencies import get_db

router = APIRouter()


@router.post(
    "/matches/{match_id}/players",
    response_model=stats_schemas.PlayerMatchStatsRead,
    status_code=status.HTTP_201_CREATED,
)
async def submit_player_stats_endpoint(
    match_id: str,
    submission: stats_schemas.PlayerStatsSubmit,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return stats_service.submit_player_stats(db=db, match_id=match_id, submission=submission, current_user=current_user)


@router.get("/matches/{match_id}/players", response_model=List[stats_schemas.PlayerMatchStatsRead])
async def get_match_player_stats_endpoint(
    match_id: str,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return stats_service.get_match_player_stats(db=db, match_id=match_id, current_user=current_user)


@router.post("/matches/{match_id}/score", response_model=stats_schemas.MatchStatsRead)
async def submit_match_score_endpoint(
    match_id: str,
    score_in: stats_schemas.MatchScoreSubmit,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return stats_service.submit_match_score(db=db, match_id=match_id, score_in=score_in, current_user=current_user)


@router.get("/matches/{match_id}", response_model=stats_schemas.MatchStatsRead)
async def get_match_stats_endpoint(
    match_id: str,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return stats_service.get_match_stats(db=db, match_id=match_id, current_user=current_user)


@router.patch("/matches/{match_id}/visibility", response_model=stats_schemas.MatchStatsRead)
async def set_match_stats_visibility_endpoint(
    match_id: str,
    visibility_in: stats_schemas.VisibilityUpdate,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return stats_service.set_match_stats_visibility(
        db=db, match_id=match_id, visibility=visibility_in.visibility, current_user=current_user
    )


@router.get("/matches/{match_id}/summary", response_model=stats_schemas.MatchStatsSummary)
async def get_match_stats_summary_endpoint(
    match_id: str,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return stats_service.get_match_stats_summary(db=db, match_id=match_id, current_user=current_user)


@router.patch("/{stats_id}", response_model=stats_schemas.PlayerMatchStatsRead)
async def update_player_stats_endpoint(
    stats_id: str,
    update: stats_schemas.PlayerStatsUpdate,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return stats_service.update_player_stats(db=db, stats_id=stats_id, update=update, current_user=current_user)


@router.post("/{stats_id}/review", response_model=stats_schemas.PlayerMatchStatsRead)
async def review_player_stats_endpoint(
    stats_id: str,
    review: stats_schemas.PlayerStatsReview,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return stats_service.review_player_stats(db=db, stats_id=stats_id, review=review, current_user=current_user)
