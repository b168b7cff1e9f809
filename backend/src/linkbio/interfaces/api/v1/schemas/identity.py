"""Request and response bodies for /auth."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from linkbio.application.identity.commands import MIN_PASSWORD_LENGTH


class RegisterRequest(BaseModel):
    # the username is free-form here; it is sanitized and validated server-side
    email: EmailStr
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)
    username: str = Field(max_length=200)
    display_name: str | None = Field(default=None, max_length=100)


class LoginRequest(BaseModel):
    username_or_email: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    username: str | None = None


class UserResponse(BaseModel):
    id: UUID
    email: str
    auth_provider: str
    is_active: bool
    is_admin: bool
    username: str | None
    last_login_at: datetime | None
    created_at: datetime
