from pydantic import BaseModel, EmailStr
from typing import Literal, Optional


class UserBase(BaseModel):
    name: str
    email: EmailStr


class UserRead(UserBase):
    id: str
    type: str
    team_id: Optional[str] = None
    role: Optional[str] = None
    number: Optional[str] = None
    position: Optional[str] = None
    status: Optional[str] = "active"

    class Config:
        from_attributes = True


class UserProfileUpdate(BaseModel):
    name: Optional[str] = None
    number: Optional[str] = None
    position: Optional[str] = None


class PushTokenRequest(BaseModel):
    token: str


class MemberStatusUpdate(BaseModel):
    status: Literal["active", "injured", "inactive"]
