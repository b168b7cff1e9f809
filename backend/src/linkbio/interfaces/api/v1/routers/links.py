"""Links router: CRUD and drag-and-drop reordering for the caller's page."""
from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from linkbio.application.profile.commands import (
    InvalidLinkError,
    LinkNotFoundError,
    ProfileNotFoundError,
)
from linkbio.interfaces.api.v1.schemas.profile import (
    LinkCreate,
    LinkReorder,
    LinkResponse,
    LinkUpdate,
)
from linkbio.interfaces.dependencies import CurrentUserId, Facade

router = APIRouter(prefix="/links", tags=["links"])


@router.get("", response_model=list[LinkResponse])
async def list_links(facade: Facade, current_user_id: CurrentUserId):
    return [LinkResponse.from_entity(link) for link in await facade.list_links(current_user_id)]


@router.post("", response_model=LinkResponse, status_code=status.HTTP_201_CREATED)
async def create_link(body: LinkCreate, facade: Facade, current_user_id: CurrentUserId):
    try:
        link = await facade.add_link(current_user_id, title=body.title, url=body.url)
    except ProfileNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    except InvalidLinkError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return LinkResponse.from_entity(link)


@router.post("/reorder", response_model=list[LinkResponse])
async def reorder_links(body: LinkReorder, facade: Facade, current_user_id: CurrentUserId):
    try:
        links = await facade.reorder_links(current_user_id, body.old_index, body.new_index)
    except InvalidLinkError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return [LinkResponse.from_entity(link) for link in links]


@router.patch("/{link_id}", response_model=LinkResponse)
async def update_link(link_id: UUID, body: LinkUpdate, facade: Facade, current_user_id: CurrentUserId):
    try:
        link = await facade.update_link(link_id, current_user_id, **body.model_dump(exclude_none=True))
    except LinkNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Link not found")
    except InvalidLinkError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return LinkResponse.from_entity(link)


@router.delete("/{link_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_link(link_id: UUID, facade: Facade, current_user_id: CurrentUserId):
    try:
        await facade.delete_link(link_id, current_user_id)
    except LinkNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Link not found")
