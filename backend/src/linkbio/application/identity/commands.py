"""Identity use-case commands: register, login, logout."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from uuid import uuid4

from jose import JWTError

from linkbio.application.profile.commands import UsernameTakenError, claim_username
from linkbio.domain.identity.entities import User, UserSession
from linkbio.domain.identity.repositories import IUserRepository, IUserSessionRepository
from linkbio.domain.identity.value_objects import Email
from linkbio.domain.profile.entities import Profile
from linkbio.domain.profile.repositories import IProfileRepository, UsernameConflictError
from linkbio.domain.profile.username import UsernamePolicy
from linkbio.infrastructure.auth.jwt import (
    create_access_token,
    hash_jti,
    read_claims,
)
from linkbio.infrastructure.auth.password import check_password, hash_password

logger = logging.getLogger(__name__)


class AuthError(Exception):
    pass


class UserAlreadyExistsError(AuthError):
    pass


class InvalidCredentialsError(AuthError):
    pass


class WeakPasswordError(AuthError):
    pass


class InvalidEmailError(AuthError):
    pass


MIN_PASSWORD_LENGTH = 6


@dataclass
class SessionResult:
    user: User
    token: str
    expires_at: datetime
    profile: Profile | None = None


async def start_session(
    user: User,
    session_repo: IUserSessionRepository,
    *,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> tuple[str, datetime]:
    """Issue a JWT for ``user`` and record its session."""
    issued = create_access_token(user.id)
    await session_repo.save(UserSession(
        id=uuid4(),
        user_id=user.id,
        jti_hash=hash_jti(issued.jti),
        expires_at=issued.expires_at,
        ip_address=ip_address,
        user_agent=user_agent,
    ))
    return issued.token, issued.expires_at


async def register_user(
    *,
    email: str,
    password: str,
    username: str,
    display_name: str | None = None,
    policy: UsernamePolicy,
    user_repo: IUserRepository,
    session_repo: IUserSessionRepository,
    profile_repo: IProfileRepository,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> SessionResult:
    """Create the account and its public profile, and sign the user in."""
    if len(password) < MIN_PASSWORD_LENGTH:
        raise WeakPasswordError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    try:
        address = Email.parse(email)
    except ValueError as exc:
        raise InvalidEmailError(str(exc))
    canonical = await claim_username(raw=username, policy=policy, profile_repo=profile_repo)
    if await user_repo.get_by_email(str(address)):
        raise UserAlreadyExistsError("Email already registered")

    user = User(id=uuid4(), email=address, password_hash=hash_password(password))
    user.record_login()
    user = await user_repo.save(user)
    profile = Profile(
        id=user.id,
        username=canonical,
        display_name=(display_name or "").strip() or str(canonical),
    )
    try:
        profile = await profile_repo.save(profile)
    except UsernameConflictError:
        raise UsernameTakenError("Username already taken")

    token, expires_at = await start_session(
        user, session_repo, ip_address=ip_address, user_agent=user_agent,
    )
    logger.info("User registered", extra={"user_id": user.id, "username": canonical})
    return SessionResult(user=user, token=token, expires_at=expires_at, profile=profile)


async def login_user(
    *,
    username_or_email: str,
    password: str,
    user_repo: IUserRepository,
    session_repo: IUserSessionRepository,
    profile_repo: IProfileRepository,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> SessionResult:
    """Authenticate by email or profile username and return a fresh access token."""
    identifier = username_or_email.strip().lower()
    user = await user_repo.get_by_email(identifier)
    profile = None
    if user is None:
        profile = await profile_repo.get_by_username(identifier)
        if profile is not None:
            user = await user_repo.get_by_id(profile.id)
    if user is None or not user.can_sign_in:
        raise InvalidCredentialsError("Invalid credentials")

    current_hash = check_password(password, user.password_hash)
    if current_hash is None:
        raise InvalidCredentialsError("Invalid credentials")
    user.password_hash = current_hash
    user.record_login()
    await user_repo.save(user)

    if profile is None:
        profile = await profile_repo.get_by_id(user.id)
    token, expires_at = await start_session(
        user, session_repo, ip_address=ip_address, user_agent=user_agent,
    )
    return SessionResult(user=user, token=token, expires_at=expires_at, profile=profile)


async def logout_user(
    *,
    token: str,
    session_repo: IUserSessionRepository,
) -> None:
    """Revoke the JWT session associated with the given token."""
    try:
        claims = read_claims(token)
    except JWTError:
        return  # expired or forged: nothing to revoke

    session = await session_repo.get_by_jti_hash(hash_jti(claims.jti))
    if session:
        await session_repo.revoke(session.id)
