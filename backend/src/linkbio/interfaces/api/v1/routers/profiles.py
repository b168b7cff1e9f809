"""Profiles router: setup, public page, QR code, edits, avatar upload, live editing."""
import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Query, UploadFile, WebSocket, WebSocketDisconnect, status
from fastapi.responses import Response
from pydantic import ValidationError

from linkbio.application.profile.commands import (
    AvatarRejectedError,
    ProfileError,
    ProfileExistsError,
    ProfileNotFoundError,
    UsernameInvalidError,
    UsernameTakenError,
)
from linkbio.application.profile.editing import ProfileSaveBuffer
from linkbio.config import get_settings
from linkbio.domain.profile.entities import Profile
from linkbio.interfaces.api.v1.schemas.profile import (
    LinkResponse,
    ProfileCreate,
    ProfileResponse,
    ProfileUpdate,
    PublicProfileResponse,
)
from linkbio.interfaces.dependencies import (
    CurrentUserId,
    Facade,
    FacadeFactory,
    OptionalUserId,
    authenticate_token,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/profiles", tags=["profiles"])


def _profile_error(exc: ProfileError) -> HTTPException:
    if isinstance(exc, ProfileNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, (UsernameTakenError, ProfileExistsError)):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def _validated_change(field: str, value: Any) -> Any:
    """Live edits go through the same schema as ``PATCH /me``."""
    return getattr(ProfileUpdate.model_validate({field: value}), field)


def _validation_detail(exc: ValidationError) -> str:
    error = exc.errors()[0]
    location = ".".join(str(part) for part in error["loc"])
    return f"{location}: {error['msg']}" if location else error["msg"]


@router.post("", response_model=ProfileResponse, status_code=status.HTTP_201_CREATED)
async def create_profile(body: ProfileCreate, facade: Facade, current_user_id: CurrentUserId):
    try:
        profile = await facade.create_profile(
            current_user_id,
            username=body.username,
            display_name=body.display_name,
            avatar_url=body.avatar_url,
        )
    except (UsernameInvalidError, UsernameTakenError, ProfileExistsError) as exc:
        raise _profile_error(exc)
    return ProfileResponse.from_entity(profile)


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(facade: Facade, current_user_id: CurrentUserId):
    profile = await facade.get_own_profile(current_user_id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return ProfileResponse.from_entity(profile)


@router.patch("/me", response_model=ProfileResponse)
async def update_my_profile(body: ProfileUpdate, facade: Facade, current_user_id: CurrentUserId):
    try:
        profile = await facade.update_profile(current_user_id, **body.model_dump(exclude_unset=True))
    except ProfileError as exc:
        raise _profile_error(exc)
    return ProfileResponse.from_entity(profile)


@router.post("/me/avatar", response_model=ProfileResponse)
async def upload_avatar(file: UploadFile, facade: Facade, current_user_id: CurrentUserId):
    data = await file.read()
    try:
        profile = await facade.upload_avatar(current_user_id, file.content_type or "", data)
    except AvatarRejectedError as exc:
        code = (
            status.HTTP_413_REQUEST_ENTITY_TOO_LARGE if exc.too_large
            else status.HTTP_415_UNSUPPORTED_MEDIA_TYPE
        )
        raise HTTPException(status_code=code, detail=str(exc))
    except ProfileNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return ProfileResponse.from_entity(profile)


@router.websocket("/me/edit")
async def edit_profile(websocket: WebSocket, facade_factory: FacadeFactory, token: str | None = None):
    """Live editing: ``change`` messages are debounced, ``blur`` saves immediately.

    Client -> server: ``{"type": "change", "field": "bio", "value": "..."}``,
    ``{"type": "blur"}``. Server -> client: ``{"type": "saved", "profile": {...}}``
    or ``{"type": "error", "detail": "..."}``.
    """
    token = token or websocket.cookies.get(get_settings().session_cookie_name)
    async with facade_factory() as facade:
        user_id = await authenticate_token(token, facade)
    if user_id is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    await websocket.accept()

    async def save(changes: dict[str, Any]) -> Profile:
        async with facade_factory() as scoped:
            return await scoped.update_profile(user_id, **changes)

    connected = True

    async def on_saved(profile: Profile) -> None:
        if connected:
            await websocket.send_json(
                {"type": "saved", "profile": ProfileResponse.from_entity(profile).model_dump(mode="json")}
            )

    async def on_error(exc: Exception) -> None:
        if connected:
            await websocket.send_json({"type": "error", "detail": str(exc)})

    buffer = ProfileSaveBuffer(
        save, get_settings().profile_save_delay_seconds,
        on_saved=on_saved, on_error=on_error, validate=_validated_change,
    )
    try:
        while True:
            try:
                message = await websocket.receive_json()
                if not isinstance(message, dict):
                    raise ValueError("Messages must be JSON objects")
                kind = message.get("type")
                if kind == "change":
                    buffer.update(str(message.get("field", "")), message.get("value"))
                elif kind == "blur":
                    await buffer.flush()
                else:
                    await on_error(ValueError(f"Unknown message type: {kind}"))
            except ValidationError as exc:
                await on_error(ValueError(_validation_detail(exc)))
            except (ValueError, ProfileError) as exc:
                await on_error(exc)
    except WebSocketDisconnect:
        connected = False
        try:
            await buffer.close()
        except ProfileError as exc:
            logger.warning("Pending profile changes dropped on disconnect: %s", exc, extra={"user_id": user_id})


@router.get("/{username}", response_model=PublicProfileResponse)
async def get_public_profile(username: str, facade: Facade, current_user_id: OptionalUserId):
    page = await facade.get_public_profile(username)
    if page is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return PublicProfileResponse(
        profile=ProfileResponse.from_entity(page.profile),
        links=[LinkResponse.from_entity(link) for link in page.links],
        is_owner=current_user_id == page.profile.id,
    )


@router.get("/{username}/qr.png", response_class=Response)
async def get_profile_qr_code(username: str, facade: Facade, scale: int = Query(default=8, ge=2, le=40)):
    qr = await facade.profile_qr_code(username, scale=scale)
    if qr is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return Response(
        content=qr.png,
        media_type="image/png",
        headers={"Content-Disposition": f'attachment; filename="{qr.filename}"'},
    )
