from pydantic import BaseModel, EmailStr, Field
from typing import Literal, Optional

from .user_schemas import UserRead


class Token(BaseModel):
    access_token: str
    token_type: str


class TokenData(BaseModel):
    user_id: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1, max_length=100)
    type: Literal["trainer", "player"]


class AuthResponse(Token):
    user: UserRead
