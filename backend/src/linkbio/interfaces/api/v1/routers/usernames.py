"""Usernames router: live validation and availability."""
from fastapi import APIRouter, Query

from linkbio.interfaces.api.v1.schemas.profile import UsernameCheckResponse
from linkbio.interfaces.dependencies import Facade

router = APIRouter(prefix="/usernames", tags=["usernames"])


@router.get("/check", response_model=UsernameCheckResponse)
async def check_username(facade: Facade, username: str = Query("", max_length=200)):
    check = await facade.check_username(username)
    v = check.validation
    return UsernameCheckResponse(
        sanitized=v.sanitized,
        is_valid=v.is_valid,
        errors=list(v.errors),
        preview=v.preview,
        available=check.available,
        message=check.message,
    )
