"""Profile use-case commands: username claims, profile edits, links, avatars."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol
from uuid import UUID, uuid4

from linkbio.domain.identity.repositories import IUserRepository, IUserSessionRepository
from linkbio.domain.profile.entities import Link, Profile, move_link, renumber
from linkbio.domain.profile.repositories import (
    ILinkRepository,
    IProfileRepository,
    UsernameConflictError,
)
from linkbio.domain.profile.username import (
    UsernamePolicy,
    ValidationResult,
    describe_transformation,
)
from linkbio.domain.profile.value_objects import LinkUrl, Username

logger = logging.getLogger(__name__)


class ProfileError(Exception):
    pass


class UsernameInvalidError(ProfileError):
    def __init__(self, validation: ValidationResult) -> None:
        super().__init__(validation.primary_error or "Invalid username")
        self.validation = validation


class UsernameTakenError(ProfileError):
    pass


class ProfileExistsError(ProfileError):
    pass


class ProfileNotFoundError(ProfileError):
    pass


class LinkNotFoundError(ProfileError):
    pass


class InvalidLinkError(ProfileError):
    pass


class AvatarRejectedError(ProfileError):
    def __init__(self, message: str, *, too_large: bool = False) -> None:
        super().__init__(message)
        self.too_large = too_large


class AvatarStorage(Protocol):
    def save(self, user_id: UUID, content_type: str, data: bytes) -> str: ...

    def delete_all(self, user_id: UUID) -> None: ...


@dataclass
class UsernameCheck:
    validation: ValidationResult
    available: bool | None
    message: str | None


# ── Usernames ─────────────────────────────────────────────────────────────────

async def check_username(
    *,
    raw: str,
    policy: UsernamePolicy,
    profile_repo: IProfileRepository,
) -> UsernameCheck:
    """Validate ``raw`` and, only when it is valid, ask the store if it is free."""
    validation = policy.validate(raw)
    available = None
    if validation.is_valid:
        available = not await profile_repo.username_exists(validation.sanitized)
    return UsernameCheck(
        validation=validation,
        available=available,
        message=describe_transformation(raw, validation.sanitized),
    )


async def claim_username(
    *,
    raw: str,
    policy: UsernamePolicy,
    profile_repo: IProfileRepository,
    current_owner: UUID | None = None,
) -> Username:
    """Validate and check availability. Returns the canonical username.

    A username already held by ``current_owner`` counts as available.
    """
    validation = policy.validate(raw)
    if not validation.is_valid:
        raise UsernameInvalidError(validation)
    holder = await profile_repo.get_by_username(validation.sanitized)
    if holder is not None and holder.id != current_owner:
        raise UsernameTakenError("Username already taken")
    return Username(validation.sanitized)


# ── Profiles ──────────────────────────────────────────────────────────────────

async def create_profile(
    *,
    user_id: UUID,
    username: str,
    display_name: str | None = None,
    avatar_url: str | None = None,
    policy: UsernamePolicy,
    profile_repo: IProfileRepository,
) -> Profile:
    if await profile_repo.get_by_id(user_id) is not None:
        raise ProfileExistsError("Profile already exists")
    canonical = await claim_username(raw=username, policy=policy, profile_repo=profile_repo)
    profile = Profile(
        id=user_id,
        username=canonical,
        display_name=(display_name or "").strip() or str(canonical),
        avatar_url=avatar_url,
    )
    try:
        profile = await profile_repo.save(profile)
    except UsernameConflictError:
        raise UsernameTakenError("Username already taken")
    logger.info("Profile created", extra={"user_id": user_id, "username": canonical})
    return profile


_UNSET: Any = object()


async def update_profile(
    *,
    user_id: UUID,
    display_name: str | None = _UNSET,
    bio: str | None = _UNSET,
    username: str = _UNSET,
    avatar_url: str | None = _UNSET,
    theme_settings: dict | None = _UNSET,
    policy: UsernamePolicy,
    profile_repo: IProfileRepository,
) -> Profile:
    """Apply a partial update. Only the keyword arguments actually passed change."""
    profile = await profile_repo.get_by_id(user_id)
    if profile is None:
        raise ProfileNotFoundError("Profile not found")

    if username is not _UNSET:
        profile.username = await claim_username(
            raw=username, policy=policy, profile_repo=profile_repo, current_owner=user_id,
        )
    if display_name is not _UNSET:
        profile.display_name = display_name
    if bio is not _UNSET:
        profile.bio = bio
    if avatar_url is not _UNSET:
        profile.avatar_url = avatar_url
    if theme_settings is not _UNSET:
        profile.theme_settings = dict(theme_settings or {})
    profile.touch()

    try:
        return await profile_repo.save(profile)
    except UsernameConflictError:
        raise UsernameTakenError("Username already taken")


async def upload_avatar(
    *,
    user_id: UUID,
    content_type: str,
    data: bytes,
    allowed_types: list[str],
    max_size_mb: int,
    storage: AvatarStorage,
    profile_repo: IProfileRepository,
) -> Profile:
    profile = await profile_repo.get_by_id(user_id)
    if profile is None:
        raise ProfileNotFoundError("Profile not found")
    if content_type not in allowed_types:
        kinds = ", ".join(t.split("/")[-1].upper() for t in allowed_types)
        raise AvatarRejectedError(f"Invalid file type. Allowed types: {kinds}")
    if len(data) > max_size_mb * 1024 * 1024:
        raise AvatarRejectedError(f"File size too large. Maximum size: {max_size_mb}MB", too_large=True)

    profile.avatar_url = storage.save(user_id, content_type, data)
    profile.touch()
    logger.info("Avatar uploaded", extra={"user_id": user_id})
    return await profile_repo.save(profile)


# ── Links ─────────────────────────────────────────────────────────────────────

def _parse_link(title: str, url: str) -> tuple[str, LinkUrl]:
    if not title.strip() or not url.strip():
        raise InvalidLinkError("Please enter both a title and URL")
    try:
        return title.strip(), LinkUrl.parse(url)
    except ValueError:
        raise InvalidLinkError(
            "Please enter a valid URL (e.g., example.com or https://example.com)"
        )


async def add_link(
    *,
    user_id: UUID,
    title: str,
    url: str,
    profile_repo: IProfileRepository,
    link_repo: ILinkRepository,
) -> Link:
    if await profile_repo.get_by_id(user_id) is None:
        raise ProfileNotFoundError("Profile not found")
    clean_title, link_url = _parse_link(title, url)
    existing = await link_repo.list_by_user(user_id)
    link = Link(id=uuid4(), user_id=user_id, title=clean_title, url=link_url, position=len(existing))
    return await link_repo.save(link)


async def update_link(
    *,
    link_id: UUID,
    user_id: UUID,
    title: str | None = None,
    url: str | None = None,
    link_repo: ILinkRepository,
) -> Link:
    link = await link_repo.get_by_id(link_id, user_id)
    if link is None:
        raise LinkNotFoundError("Link not found")
    new_title, new_url = _parse_link(
        title if title is not None else link.title,
        url if url is not None else str(link.url),
    )
    link.title = new_title
    link.url = new_url
    return await link_repo.save(link)


async def delete_link(*, link_id: UUID, user_id: UUID, link_repo: ILinkRepository) -> None:
    link = await link_repo.get_by_id(link_id, user_id)
    if link is None:
        raise LinkNotFoundError("Link not found")
    await link_repo.delete(link_id, user_id)
    remaining = [other for other in await link_repo.list_by_user(user_id) if other.id != link_id]
    await link_repo.save_positions(renumber(remaining))


async def reorder_links(
    *,
    user_id: UUID,
    old_index: int,
    new_index: int,
    link_repo: ILinkRepository,
) -> list[Link]:
    """Move one link from ``old_index`` to ``new_index`` and persist positions."""
    links = await link_repo.list_by_user(user_id)
    if old_index == new_index and 0 <= old_index < len(links):
        return links
    try:
        reordered = move_link(links, old_index, new_index)
    except IndexError:
        raise InvalidLinkError("Link index out of range")
    await link_repo.save_positions(reordered)
    logger.info(
        "Links reordered %d -> %d", old_index, new_index, extra={"user_id": user_id},
    )
    return reordered


# ── Admin ─────────────────────────────────────────────────────────────────────

async def delete_user(
    *,
    user_id: UUID,
    user_repo: IUserRepository,
    session_repo: IUserSessionRepository,
    profile_repo: IProfileRepository,
    link_repo: ILinkRepository,
    storage: AvatarStorage,
) -> None:
    """Remove a user's links, profile and avatars, then deactivate the account."""
    if await user_repo.get_by_id(user_id) is None:
        raise ProfileNotFoundError("User not found")
    await link_repo.delete_all_for_user(user_id)
    await profile_repo.delete(user_id)
    storage.delete_all(user_id)
    await session_repo.revoke_all_for_user(user_id)
    await user_repo.delete(user_id)
    logger.info("User deleted", extra={"user_id": user_id})
