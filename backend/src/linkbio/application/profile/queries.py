"""Profile use-case queries."""
from dataclasses import dataclass
from uuid import UUID

from linkbio.domain.profile.entities import Link, Profile
from linkbio.domain.profile.repositories import ILinkRepository, IProfileRepository


@dataclass
class PublicProfile:
    profile: Profile
    links: list[Link]


async def get_public_profile(
    username: str,
    profile_repo: IProfileRepository,
    link_repo: ILinkRepository,
) -> PublicProfile | None:
    profile = await profile_repo.get_by_username(username.lower())
    if profile is None:
        return None
    links = await link_repo.list_by_user(profile.id)
    return PublicProfile(profile=profile, links=sorted(links, key=lambda link: link.position))


async def get_own_profile(user_id: UUID, profile_repo: IProfileRepository) -> Profile | None:
    return await profile_repo.get_by_id(user_id)


async def list_profiles(profile_repo: IProfileRepository) -> list[Profile]:
    return await profile_repo.list_all()
