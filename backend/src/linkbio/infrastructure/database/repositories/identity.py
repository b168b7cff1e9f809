"""Account and session repositories backed by the ``identity`` schema."""
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from linkbio.domain.identity.entities import AuthProvider, User, UserSession
from linkbio.domain.identity.value_objects import Email, PasswordHash
from linkbio.infrastructure.database.models.identity import UserModel, UserSessionModel


class UserRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, user_id: UUID) -> User | None:
        model = await self._session.get(UserModel, user_id)
        return _user_from_row(model) if model else None

    async def get_by_email(self, email: str) -> User | None:
        model = await self._session.scalar(
            select(UserModel).where(UserModel.email == email.strip().lower(), UserModel.deleted_at.is_(None))
        )
        return _user_from_row(model) if model else None

    async def save(self, user: User) -> User:
        """Insert or update; every mutable account field is written back."""
        model = await self._session.get(UserModel, user.id)
        if model is None:
            model = UserModel(id=user.id, created_at=user.created_at)
            self._session.add(model)
        model.email = str(user.email)
        model.password_hash = str(user.password_hash)
        model.auth_provider = user.auth_provider.value
        model.is_active = user.is_active
        model.last_login_at = user.last_login_at
        model.updated_at = user.updated_at
        model.deleted_at = user.deleted_at
        await self._session.flush()
        return user

    async def delete(self, user_id: UUID) -> None:
        """Accounts are deactivated, never removed, so the email stays reserved."""
        user = await self.get_by_id(user_id)
        if user is not None:
            user.deactivate()
            await self.save(user)


class UserSessionRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_jti_hash(self, jti_hash: str) -> UserSession | None:
        model = await self._session.scalar(
            select(UserSessionModel).where(UserSessionModel.jti_hash == jti_hash)
        )
        return _session_from_row(model) if model else None

    async def save(self, session: UserSession) -> UserSession:
        self._session.add(UserSessionModel(
            id=session.id,
            user_id=session.user_id,
            jti_hash=session.jti_hash,
            ip_address=session.ip_address,
            user_agent=session.user_agent,
            expires_at=session.expires_at,
            created_at=session.created_at,
            revoked_at=session.revoked_at,
        ))
        await self._session.flush()
        return session

    async def revoke(self, session_id: UUID) -> None:
        await self._revoke(UserSessionModel.id == session_id)

    async def revoke_all_for_user(self, user_id: UUID) -> None:
        await self._revoke(UserSessionModel.user_id == user_id)

    async def _revoke(self, condition) -> None:
        await self._session.execute(
            update(UserSessionModel)
            .where(condition, UserSessionModel.revoked_at.is_(None))
            .values(revoked_at=datetime.now(timezone.utc))
        )


def _user_from_row(m: UserModel) -> User:
    return User(
        id=m.id,
        email=Email(m.email),
        password_hash=PasswordHash(m.password_hash),
        auth_provider=AuthProvider(m.auth_provider),
        is_active=m.is_active,
        last_login_at=m.last_login_at,
        created_at=m.created_at,
        updated_at=m.updated_at,
        deleted_at=m.deleted_at,
    )


def _session_from_row(m: UserSessionModel) -> UserSession:
    return UserSession(
        id=m.id,
        user_id=m.user_id,
        jti_hash=m.jti_hash,
        ip_address=str(m.ip_address) if m.ip_address else None,
        user_agent=m.user_agent,
        expires_at=m.expires_at,
        created_at=m.created_at,
        revoked_at=m.revoked_at,
    )
