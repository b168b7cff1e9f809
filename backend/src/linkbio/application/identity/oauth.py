"""OAuth callback handling: code exchange, account linking, redirect choice."""
from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from uuid import uuid4

from linkbio.application.identity.commands import SessionResult, start_session
from linkbio.domain.identity.entities import AuthProvider, User
from linkbio.domain.identity.repositories import IUserRepository, IUserSessionRepository
from linkbio.domain.identity.value_objects import Email
from linkbio.domain.profile.repositories import IProfileRepository
from linkbio.infrastructure.auth.oauth import OAuthIdentity
from linkbio.infrastructure.auth.password import unusable_password

logger = logging.getLogger(__name__)

AUTH_ERROR_PATH = "/auth/auth-error"
SETUP_PROFILE_PATH = "/auth/setup-profile"

CodeExchange = Callable[[str], Awaitable[OAuthIdentity]]


@dataclass
class OAuthCallbackResult:
    redirect_url: str
    session: SessionResult | None = None


def safe_next_path(next_path: str | None) -> str:
    """Only site-relative paths are honoured; anything else becomes ``/``."""
    if not next_path or not next_path.startswith("/") or next_path.startswith("//"):
        return "/"
    return next_path


def resolve_oauth_redirect(origin: str, flow: str | None, username: str | None) -> str:
    """Where a signed-in OAuth user lands.

    Users without a profile finish setup first. Users with one go to their
    page whether they came through the sign-up or the sign-in button.
    """
    origin = origin.rstrip("/")
    if username is None:
        return f"{origin}{SETUP_PROFILE_PATH}"
    logger.info("Redirecting existing user to profile", extra={"flow": flow or "signin", "username": username})
    return f"{origin}/{username}"


async def handle_oauth_callback(
    *,
    origin: str,
    code: str | None,
    flow: str | None,
    next_path: str | None,
    exchange: CodeExchange,
    user_repo: IUserRepository,
    session_repo: IUserSessionRepository,
    profile_repo: IProfileRepository,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> OAuthCallbackResult:
    origin = origin.rstrip("/")
    if not code:
        return OAuthCallbackResult(redirect_url=f"{origin}{safe_next_path(next_path)}")

    try:
        identity = await exchange(code)
    except Exception:
        logger.exception("OAuth callback error", extra={"flow": flow or "signin"})
        return OAuthCallbackResult(redirect_url=f"{origin}{AUTH_ERROR_PATH}")

    try:
        address = Email.parse(identity.email)
    except ValueError:
        logger.warning("Provider returned an unusable email address", extra={"flow": flow or "signin"})
        return OAuthCallbackResult(redirect_url=f"{origin}{AUTH_ERROR_PATH}")

    user = await user_repo.get_by_email(str(address))
    if user is None:
        user = User(
            id=uuid4(),
            email=address,
            password_hash=unusable_password(),
            auth_provider=AuthProvider.OAUTH,
        )
        logger.info("Creating account from OAuth sign-in", extra={"user_id": user.id})
    elif not user.can_sign_in:
        return OAuthCallbackResult(redirect_url=f"{origin}{AUTH_ERROR_PATH}")
    user.record_login()
    user = await user_repo.save(user)

    token, expires_at = await start_session(
        user, session_repo, ip_address=ip_address, user_agent=user_agent,
    )
    profile = await profile_repo.get_by_id(user.id)
    session = SessionResult(user=user, token=token, expires_at=expires_at, profile=profile)
    username = str(profile.username) if profile is not None else None
    return OAuthCallbackResult(
        redirect_url=resolve_oauth_redirect(origin, flow, username),
        session=session,
    )
