"""Admin router: allow-listed accounts only."""
from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from linkbio.application.profile.commands import ProfileNotFoundError
from linkbio.interfaces.api.v1.schemas.profile import ProfileResponse
from linkbio.interfaces.dependencies import CurrentUserId, Facade
from linkbio.interfaces.facade import AdminRequiredError

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/profiles", response_model=list[ProfileResponse])
async def list_profiles(facade: Facade, current_user_id: CurrentUserId):
    try:
        profiles = await facade.list_profiles(current_user_id)
    except AdminRequiredError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
    return [ProfileResponse.from_entity(p) for p in profiles]


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: UUID, facade: Facade, current_user_id: CurrentUserId):
    try:
        await facade.delete_user(current_user_id, user_id)
    except AdminRequiredError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
    except ProfileNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
