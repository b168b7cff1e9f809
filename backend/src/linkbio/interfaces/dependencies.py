"""Request-scoped wiring: database session, facade, OAuth exchanger and the caller's identity."""
from __future__ import annotations

from collections.abc import AsyncGenerator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from linkbio.config import Settings, get_settings
from linkbio.infrastructure.auth.jwt import hash_jti, read_claims
from linkbio.infrastructure.auth.oauth import OAuthCodeExchanger
from linkbio.infrastructure.database.connection import get_db_session
from linkbio.infrastructure.database.repositories.identity import UserRepository, UserSessionRepository
from linkbio.infrastructure.database.repositories.profile import LinkRepository, ProfileRepository
from linkbio.infrastructure.storage.avatars import LocalAvatarStorage
from linkbio.interfaces.facade import LinkBioFacade

# ── Session ───────────────────────────────────────────────────────────────────

_bearer = HTTPBearer(auto_error=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with get_db_session() as session:
        yield session


# ── Facade ────────────────────────────────────────────────────────────────────

def build_facade(session: AsyncSession, settings: Settings) -> LinkBioFacade:
    return LinkBioFacade(
        settings=settings,
        user_repo=UserRepository(session),
        session_repo=UserSessionRepository(session),
        profile_repo=ProfileRepository(session),
        link_repo=LinkRepository(session),
        storage=LocalAvatarStorage(settings.storage_path, settings.media_url_prefix),
    )


async def get_facade(session: Annotated[AsyncSession, Depends(get_db)]) -> LinkBioFacade:
    return build_facade(session, get_settings())


@asynccontextmanager
async def _facade_scope() -> AsyncGenerator[LinkBioFacade, None]:
    async with get_db_session() as session:
        yield build_facade(session, get_settings())


def get_facade_factory() -> Callable[[], AbstractAsyncContextManager[LinkBioFacade]]:
    """For long-lived connections: one committed unit of work per call."""
    return _facade_scope


def get_oauth_exchanger() -> OAuthCodeExchanger:
    return OAuthCodeExchanger(get_settings())


# ── Auth ──────────────────────────────────────────────────────────────────────

_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Could not validate credentials",
    headers={"WWW-Authenticate": "Bearer"},
)


def extract_token(request: Request, credentials: HTTPAuthorizationCredentials | None) -> str | None:
    """Bearer header first, then the session cookie set by the OAuth callback."""
    if credentials is not None:
        return credentials.credentials
    return request.cookies.get(get_settings().session_cookie_name)


async def authenticate_token(token: str | None, facade: LinkBioFacade) -> UUID | None:
    if not token:
        return None
    try:
        claims = read_claims(token)
    except JWTError:
        return None
    # a valid signature is not enough: the session must not be revoked
    if not await facade.is_session_active(hash_jti(claims.jti)):
        return None
    return claims.user_id


async def get_current_user_id(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)],
    facade: Annotated[LinkBioFacade, Depends(get_facade)],
) -> UUID:
    user_id = await authenticate_token(extract_token(request, credentials), facade)
    if user_id is None:
        raise _CREDENTIALS_EXCEPTION
    return user_id


async def get_optional_user_id(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)],
    facade: Annotated[LinkBioFacade, Depends(get_facade)],
) -> UUID | None:
    return await authenticate_token(extract_token(request, credentials), facade)


# Annotated aliases used in router signatures
Facade = Annotated[LinkBioFacade, Depends(get_facade)]
CurrentUserId = Annotated[UUID, Depends(get_current_user_id)]
OptionalUserId = Annotated[UUID | None, Depends(get_optional_user_id)]
OAuthExchange = Annotated[OAuthCodeExchanger, Depends(get_oauth_exchanger)]
FacadeFactory = Annotated[
    Callable[[], AbstractAsyncContextManager[LinkBioFacade]], Depends(get_facade_factory)
]
