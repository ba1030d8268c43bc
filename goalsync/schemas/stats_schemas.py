from pydantic import BaseModel, Field
from typing import List, Literal, Optional
from datetime import datetime


class StatsRecord(BaseModel):
    goals: int = Field(0, ge=0)
    assists: int = Field(0, ge=0)
    yellow_cards: int = Field(0, ge=0, le=2)
    red_cards: int = Field(0, ge=0, le=1)
    minutes_played: int = Field(90, ge=0, le=150)
    shots_on_target: int = Field(0, ge=0)
    # Goalkeepers only
    saves: Optional[int] = Field(None, ge=0)
    clean_sheet: Optional[bool] = None
    goals_conceded: Optional[int] = Field(None, ge=0)


class PlayerStatsSubmit(BaseModel):
    stats: StatsRecord
    # Set by a trainer submitting on behalf of a player
    player_id: Optional[str] = None


class PlayerStatsUpdate(BaseModel):
    stats: StatsRecord


class PlayerStatsReview(BaseModel):
    approved: bool
    comments: Optional[str] = None


class PlayerMatchStatsRead(BaseModel):
    id: str
    match_id: str
    player_id: str
    stats: StatsRecord
    status: str
    submitted_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None
    comments: Optional[str] = None

    class Config:
        from_attributes = True


class PendingPlayerStatsRead(PlayerMatchStatsRead):
    match_title: str
    match_date: Optional[datetime] = None
    player_name: str


class PlayerStatsWithMatch(PlayerMatchStatsRead):
    match_title: str
    match_date: Optional[datetime] = None
    opponent: str


class MatchNeedingStats(BaseModel):
    id: str
    match_title: str
    match_date: Optional[datetime] = None
    opponent: str


class PlayerStatsOverview(BaseModel):
    pending_approval: List[PlayerStatsWithMatch]
    approved: List[PlayerStatsWithMatch]
    rejected: List[PlayerStatsWithMatch]
    needs_submission: List[MatchNeedingStats]


class MatchScoreSubmit(BaseModel):
    home_score: int = Field(..., ge=0)
    away_score: int = Field(..., ge=0)
    possession: int = Field(50, ge=0, le=100)
    status: Literal["draft", "final"] = "draft"


class MatchStatsRead(BaseModel):
    id: str
    match_id: str
    team_id: str
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    possession: Optional[int] = None
    status: str
    visibility: str
    is_complete: bool
    submitted_by: Optional[str] = None
    submitted_at: Optional[datetime] = None
    released_at: Optional[datetime] = None
    skip_reason: Optional[str] = None

    class Config:
        from_attributes = True


class VisibilityUpdate(BaseModel):
    visibility: Literal["private", "public"]


class MatchStatsSummary(BaseModel):
    match_id: str
    players: int
    total_goals: int
    total_assists: int
    total_shots_on_target: int
    total_yellow_cards: int
    total_red_cards: int
    avg_minutes_played: int


class PlayerSeasonTotals(BaseModel):
    player_id: str
    matches: int
    goals: int
    assists: int
    yellow_cards: int
    red_cards: int
    minutes_played: int
    shots_on_target: int
    saves: int
    clean_sheets: int
