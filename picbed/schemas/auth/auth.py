# picbed/schemas/auth/auth.py
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

__all__ = ["LoginRequest", "RegisterRequest", "UserResponse", "LoginResponse", "MessageResponse"]


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.\-]+$")
    password: str = Field(..., min_length=6, max_length=128)
    email: Optional[str] = Field(None, max_length=100)


class UserResponse(BaseModel):
    id: int
    username: str
    email: Optional[str] = None
    is_active: bool
    created_at: datetime
    last_login_at: datetime

    @classmethod
    def from_dto(cls, user) -> "UserResponse":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            is_active=user.is_active,
            created_at=user.created_at,
            last_login_at=user.last_login_at,
        )


class LoginResponse(BaseModel):
    success: bool
    message: str
    token: Optional[str] = None
    expires_at: Optional[datetime] = None
    user: Optional[UserResponse] = None


class MessageResponse(BaseModel):
    message: str
