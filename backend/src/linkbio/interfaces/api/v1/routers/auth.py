"""Auth router: register, login, logout, me, OAuth callback."""
from fastapi import APIRouter, HTTPException, Request, Response, status
from fastapi.responses import RedirectResponse
from fastapi.security.utils import get_authorization_scheme_param

from linkbio.application.identity.commands import (
    InvalidCredentialsError,
    InvalidEmailError,
    SessionResult,
    UserAlreadyExistsError,
    WeakPasswordError,
)
from linkbio.application.profile.commands import UsernameInvalidError, UsernameTakenError
from linkbio.config import get_settings
from linkbio.interfaces.api.v1.schemas.identity import (
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from linkbio.interfaces.dependencies import CurrentUserId, Facade, OAuthExchange

router = APIRouter(prefix="/auth", tags=["auth"])


def _token_response(result: SessionResult) -> TokenResponse:
    return TokenResponse(
        access_token=result.token,
        expires_at=result.expires_at,
        username=str(result.profile.username) if result.profile else None,
    )


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, request: Request, facade: Facade):
    try:
        result = await facade.register(
            email=body.email,
            password=body.password,
            username=body.username,
            display_name=body.display_name,
            ip_address=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
        )
    except (UsernameInvalidError, WeakPasswordError, InvalidEmailError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except (UserAlreadyExistsError, UsernameTakenError) as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    return _token_response(result)


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, request: Request, facade: Facade):
    try:
        result = await facade.login(
            username_or_email=body.username_or_email,
            password=body.password,
            ip_address=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
        )
    except InvalidCredentialsError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return _token_response(result)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(facade: Facade, current_user_id: CurrentUserId, request: Request, response: Response):
    settings = get_settings()
    scheme, token = get_authorization_scheme_param(request.headers.get("authorization"))
    if scheme.lower() != "bearer" or not token:
        token = request.cookies.get(settings.session_cookie_name, "")
    await facade.logout(token)
    response.delete_cookie(settings.session_cookie_name)


@router.get("/me", response_model=UserResponse)
async def me(facade: Facade, current_user_id: CurrentUserId):
    user = await facade.get_current_user(current_user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    profile = await facade.get_own_profile(current_user_id)
    return UserResponse(
        id=user.id,
        email=str(user.email),
        auth_provider=user.auth_provider.value,
        is_active=user.is_active,
        is_admin=get_settings().is_admin_email(str(user.email)),
        username=str(profile.username) if profile else None,
        last_login_at=user.last_login_at,
        created_at=user.created_at,
    )


@router.get("/callback")
async def oauth_callback(
    request: Request,
    facade: Facade,
    exchange: OAuthExchange,
    code: str | None = None,
    flow: str | None = None,
    next: str | None = None,
):
    settings = get_settings()
    result = await facade.oauth_callback(
        origin=settings.public_base_url,
        code=code,
        flow=flow,
        next_path=next,
        exchange=exchange,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    response = RedirectResponse(url=result.redirect_url, status_code=status.HTTP_303_SEE_OTHER)
    if result.session is not None:
        response.set_cookie(
            settings.session_cookie_name,
            result.session.token,
            expires=result.session.expires_at,
            httponly=True,
            secure=not settings.is_development,
            samesite="lax",
        )
    return response
