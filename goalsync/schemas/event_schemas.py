from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Dict, List, Literal, Optional
from datetime import datetime, timezone


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    # Stored datetimes are naive UTC
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class RosterEntry(BaseModel):
    id: str
    name: str
    number: Optional[str] = None
    position: Literal["GK", "DEF", "MID", "FWD"]
    is_starter: bool = False
    field_position: Optional[str] = None
    status: Optional[Literal["active", "injured"]] = None


class EventBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    type: Literal["training", "match", "meeting"]
    start_time: datetime
    end_time: datetime
    location: str
    description: Optional[str] = None
    is_outdoor: bool = False
    is_attendance_required: bool = True
    opponent: Optional[str] = None
    is_home_game: Optional[bool] = None
    formation: Optional[str] = None
    roster: List[RosterEntry] = []

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_times(cls, value):
        return to_naive_utc(value)


class EventCreate(EventBase):
    team_id: str

    @model_validator(mode="after")
    def check_times_and_match_fields(self):
        if self.end_time <= self.start_time:
            raise ValueError("End time must be after start time")
        if self.type == "match" and not self.opponent:
            raise ValueError("A match requires an opponent")
        return self


class EventUpdate(BaseModel):
    title: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    location: Optional[str] = None
    description: Optional[str] = None
    is_outdoor: Optional[bool] = None
    is_attendance_required: Optional[bool] = None
    status: Optional[Literal["scheduled", "completed", "cancelled"]] = None
    opponent: Optional[str] = None
    is_home_game: Optional[bool] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_times(cls, value):
        return to_naive_utc(value)


class EventRead(EventBase):
    id: str
    team_id: str
    status: str
    score_submitted: bool = False
    attendees: List[str] = []
    absentees: List[str] = []
    created_by: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class LineupUpdate(BaseModel):
    formation: str
    roster: List[RosterEntry]


class AttendanceUpdate(BaseModel):
    user_id: str
    is_attending: bool


class AttendanceStatus(BaseModel):
    event_id: str
    has_marked_attendance: bool


class FormationTemplate(BaseModel):
    id: str
    name: str
    description: str
    positions: Dict[str, int]
