from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import datetime


class MessageCreate(BaseModel):
    text: str = Field(..., min_length=1, max_length=2000)


class MessageUpdate(MessageCreate):
    pass


class MessageRead(BaseModel):
    id: str
    team_id: str
    user_id: str
    user_name: Optional[str] = None
    text: str
    type: str
    payload: Optional[Dict[str, Any]] = None
    edited: bool = False
    read_by: List[str] = []
    timestamp: datetime

    class Config:
        from_attributes = True
