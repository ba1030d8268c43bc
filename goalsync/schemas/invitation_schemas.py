from pydantic import BaseModel, EmailStr
from typing import Optional
from datetime import datetime


class InvitationCreate(BaseModel):
    player_email: EmailStr
    position: Optional[str] = None
    number: str


class InvitationRead(BaseModel):
    id: str
    team_id: str
    team_name: Optional[str] = None
    player_email: str
    position: Optional[str] = None
    number: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None
    responded_at: Optional[datetime] = None

    class Config:
        from_attributes = True
