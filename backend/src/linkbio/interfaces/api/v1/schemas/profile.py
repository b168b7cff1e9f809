"""Pydantic v2 schemas for usernames, profiles and links."""
from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from linkbio.domain.profile.entities import Link, Profile


class UsernameCheckResponse(BaseModel):
    sanitized: str
    is_valid: bool
    errors: list[str]
    preview: str
    available: bool | None = None
    message: str | None = None


class ProfileCreate(BaseModel):
    username: str
    display_name: str | None = None
    avatar_url: str | None = None


class ProfileUpdate(BaseModel):
    # omitted leaves the username alone; an explicit null is a 422
    username: str = Field(default=None, max_length=200)
    display_name: str | None = None
    bio: str | None = Field(default=None, max_length=500)
    avatar_url: str | None = None
    theme_settings: dict[str, Any] | None = None


class LinkResponse(BaseModel):
    id: UUID
    title: str
    url: str
    position: int

    @classmethod
    def from_entity(cls, link: Link) -> "LinkResponse":
        return cls(id=link.id, title=link.title, url=str(link.url), position=link.position)


class ProfileResponse(BaseModel):
    id: UUID
    username: str
    display_name: str | None
    bio: str | None
    avatar_url: str | None
    verified: bool
    theme_settings: dict[str, Any]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, profile: Profile) -> "ProfileResponse":
        return cls(
            id=profile.id,
            username=str(profile.username),
            display_name=profile.display_name,
            bio=profile.bio,
            avatar_url=profile.avatar_url,
            verified=profile.verified,
            theme_settings=profile.theme_settings,
            created_at=profile.created_at,
            updated_at=profile.updated_at,
        )


class PublicProfileResponse(BaseModel):
    profile: ProfileResponse
    links: list[LinkResponse]
    is_owner: bool = False


class LinkCreate(BaseModel):
    title: str
    url: str


class LinkUpdate(BaseModel):
    title: str | None = None
    url: str | None = None


class LinkReorder(BaseModel):
    old_index: int = Field(ge=0)
    new_index: int = Field(ge=0)
