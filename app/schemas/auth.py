"""Pydantic schemas for authentication endpoints."""

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator

from app.services.identifiers import Channel

PASSWORD_PATTERN = re.compile(r"^(?=.*\d)(?=.*[a-z])(?=.*[A-Z]).{8,64}$")


def check_password_strength(value: str) -> str:
    if not PASSWORD_PATTERN.match(value):
        raise ValueError("Password is weak: use 8-64 characters with a digit, a lower-case and an upper-case letter")
    return value


class RegisterRequest(BaseModel):
    email: str
    phone_number: str
    password: str
    first_name: str
    last_name: str
    verify_by: Channel = Channel.EMAIL

    @field_validator("password")
    @classmethod
    def password_strength(cls, value: str) -> str:
        return check_password_strength(value)


class LoginRequest(BaseModel):
    username: str
    password: str


class IdentifierRequest(BaseModel):
    """Body for endpoints that only need a login identifier."""

    username: str


class RefreshRequest(BaseModel):
    refresh_token: str | None = None


class ResetPasswordRequest(BaseModel):
    code: str
    new_password: str

    @field_validator("new_password")
    @classmethod
    def password_strength(cls, value: str) -> str:
        return check_password_strength(value)


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str

    @field_validator("new_password")
    @classmethod
    def password_strength(cls, value: str) -> str:
        return check_password_strength(value)


class UserResponse(BaseModel):
    """Public view of a user. Never carries password or token digests."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    phone_number: str
    first_name: str
    last_name: str
    role: str
    is_verified: bool
    is_active: bool
    created_at: datetime
    last_login_at: datetime | None = None


class MessageResponse(BaseModel):
    message: str


class RegisterResponse(BaseModel):
    message: str
    user: UserResponse


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class SessionResponse(BaseModel):
    message: str
    user: UserResponse
    access_token: str | None = None
    refresh_token: str | None = None
