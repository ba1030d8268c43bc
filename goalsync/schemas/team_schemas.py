from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class TeamBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class TeamCreate(TeamBase):
    pass


class TeamRead(TeamBase):
    id: str
    trainer_id: str
    players: List[str] = []
    allow_player_injury_reporting: bool = True
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TeamNameUpdate(TeamBase):
    pass


class TeamSettingsUpdate(BaseModel):
    allow_player_injury_reporting: Optional[bool] = None


class TeamMember(BaseModel):
    id: str
    name: str
    number: Optional[str] = None
    position: Optional[str] = None  # "GK", "DEF", "MID", "FWD", "Coach", "Unassigned"
    role: str  # "staff" or "player"
    status: str = "active"


class InjuredPlayerInMatch(BaseModel):
    id: str
    name: str
    match_id: str
    match_title: str
    start_time: datetime
