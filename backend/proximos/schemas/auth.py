"""
Auth request/response schemas.
"""
from datetime import datetime

from pydantic import BaseModel, EmailStr, field_validator


def _password_length(v: str) -> str:
    if not v:
        raise ValueError("Password is required")
    if len(v.encode("utf-8")) > 72:
        raise ValueError("Password must be at most 72 bytes (bcrypt limit)")
    return v


class RegisterRequest(BaseModel):
    name: str
    email: EmailStr
    password: str

    @field_validator("password")
    @classmethod
    def password_length(cls, v: str) -> str:
        return _password_length(v)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str

    @field_validator("password")
    @classmethod
    def password_length(cls, v: str) -> str:
        return _password_length(v)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    role: str
    created_at: datetime | None = None

    class Config:
        from_attributes = True
