from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime


class PlayerAttendance(BaseModel):
    present: int = 0
    total: int = 0


class PlayerAttendanceStats(BaseModel):
    id: str
    name: str
    number: str
    position: str
    attendance: PlayerAttendance
    percentage: int


class TeamAttendanceStats(BaseModel):
    total_events: int
    team_average: int
    player_stats: List[PlayerAttendanceStats]


class AttendanceHistoryEntry(BaseModel):
    event_id: str
    title: str
    type: str
    start_time: datetime
    status: str  # "present", "absent", "unmarked"


class PlayerAttendanceHistory(BaseModel):
    player_id: str
    present: int
    total: int
    percentage: int
    events: List[AttendanceHistoryEntry]
    last_event_at: Optional[datetime] = None
