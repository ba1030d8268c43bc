from pydantic import BaseModel, Field
from typing import List, Literal
from datetime import datetime


class AnnouncementBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1)
    priority: Literal["normal", "high"] = "normal"


class AnnouncementCreate(AnnouncementBase):
    team_id: str


class AnnouncementRead(AnnouncementBase):
    id: str
    team_id: str
    created_by: str
    created_at: datetime
    read_by: List[str] = []

    class Config:
        from_attributes = True
