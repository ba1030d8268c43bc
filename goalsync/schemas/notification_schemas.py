from pydantic import BaseModel
from typing import Literal, Optional
from datetime import datetime

NotificationType = Literal[
    "stats_approved", "stats_rejected", "stats_released", "stats_needed", "approval_needed"
]


class NotificationBase(BaseModel):
    title: str
    message: str
    type: NotificationType


class NotificationCreate(NotificationBase):
    user_id: str
    team_id: Optional[str] = None
    related_id: Optional[str] = None


class NotificationRead(NotificationBase):
    id: str
    user_id: str
    team_id: Optional[str] = None
    related_id: Optional[str] = None
    read: bool
    created_at: datetime

    class Config:
        from_attributes = True
