"""Accounts and their JWT sessions."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from uuid import UUID

from .value_objects import Email, PasswordHash


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuthProvider(StrEnum):
    PASSWORD = "password"
    OAUTH = "oauth"


@dataclass
class User:
    """An account. Its public page, if any, is the Profile with the same id."""
    id: UUID
    email: Email
    password_hash: PasswordHash
    auth_provider: AuthProvider = AuthProvider.PASSWORD
    is_active: bool = True
    last_login_at: datetime | None = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)
    deleted_at: datetime | None = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def can_sign_in(self) -> bool:
        return self.is_active and not self.is_deleted

    def record_login(self) -> None:
        self.last_login_at = self.updated_at = _utcnow()

    def deactivate(self) -> None:
        self.deleted_at = self.updated_at = _utcnow()
        self.is_active = False


@dataclass
class UserSession:
    """One issued access token, keyed by the sha256 of its ``jti`` claim."""
    id: UUID
    user_id: UUID
    jti_hash: str
    expires_at: datetime
    ip_address: str | None = None
    user_agent: str | None = None
    created_at: datetime = field(default_factory=_utcnow)
    revoked_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.revoked_at is None and self.expires_at > _utcnow()

    def revoke(self) -> None:
        if self.revoked_at is None:
            self.revoked_at = _utcnow()
