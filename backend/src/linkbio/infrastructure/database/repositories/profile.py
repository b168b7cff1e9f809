"""Concrete SQLAlchemy repository implementations for the profile context."""
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import delete, exists, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from linkbio.domain.profile.entities import Link, Profile
from linkbio.domain.profile.repositories import UsernameConflictError
from linkbio.domain.profile.value_objects import LinkUrl, Username
from linkbio.infrastructure.database.models.profile import LinkModel, ProfileModel


class ProfileRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, user_id: UUID) -> Profile | None:
        result = await self._session.get(ProfileModel, user_id)
        return _to_profile(result) if result else None

    async def get_by_username(self, username: str) -> Profile | None:
        stmt = select(ProfileModel).where(ProfileModel.username == username)
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return _to_profile(row) if row else None

    async def username_exists(self, username: str) -> bool:
        stmt = select(exists().where(ProfileModel.username == username))
        return bool(await self._session.scalar(stmt))

    async def list_all(self) -> list[Profile]:
        stmt = select(ProfileModel).order_by(ProfileModel.username)
        result = await self._session.execute(stmt)
        return [_to_profile(r) for r in result.scalars()]

    async def save(self, profile: Profile) -> Profile:
        # the savepoint opens before the row changes so a duplicate username
        # only rolls back the savepoint, not the caller's transaction
        try:
            async with self._session.begin_nested():
                existing = await self._session.get(ProfileModel, profile.id)
                if existing:
                    existing.username = str(profile.username)
                    existing.display_name = profile.display_name
                    existing.bio = profile.bio
                    existing.avatar_url = profile.avatar_url
                    existing.verified = profile.verified
                    existing.theme_settings = profile.theme_settings
                    existing.updated_at = datetime.now(timezone.utc)
                else:
                    self._session.add(ProfileModel(
                        id=profile.id,
                        username=str(profile.username),
                        display_name=profile.display_name,
                        bio=profile.bio,
                        avatar_url=profile.avatar_url,
                        verified=profile.verified,
                        theme_settings=profile.theme_settings,
                        created_at=profile.created_at,
                        updated_at=profile.updated_at,
                    ))
        except IntegrityError as exc:
            raise UsernameConflictError(str(profile.username)) from exc
        return profile

    async def delete(self, user_id: UUID) -> None:
        await self._session.execute(delete(ProfileModel).where(ProfileModel.id == user_id))


class LinkRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, link_id: UUID, user_id: UUID) -> Link | None:
        stmt = select(LinkModel).where(LinkModel.id == link_id, LinkModel.user_id == user_id)
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return _to_link(row) if row else None

    async def list_by_user(self, user_id: UUID) -> list[Link]:
        stmt = (
            select(LinkModel)
            .where(LinkModel.user_id == user_id)
            .order_by(LinkModel.position, LinkModel.created_at)
        )
        result = await self._session.execute(stmt)
        return [_to_link(r) for r in result.scalars()]

    async def save(self, link: Link) -> Link:
        existing = await self._session.get(LinkModel, link.id)
        if existing:
            existing.title = link.title
            existing.url = str(link.url)
            existing.position = link.position
            existing.updated_at = datetime.now(timezone.utc)
        else:
            self._session.add(LinkModel(
                id=link.id,
                user_id=link.user_id,
                title=link.title,
                url=str(link.url),
                position=link.position,
                created_at=link.created_at,
                updated_at=link.updated_at,
            ))
        await self._session.flush()
        return link

    async def save_positions(self, links: list[Link]) -> None:
        for link in links:
            model = await self._session.get(LinkModel, link.id)
            if model is not None and model.user_id == link.user_id:
                model.position = link.position
        await self._session.flush()

    async def delete(self, link_id: UUID, user_id: UUID) -> None:
        await self._session.execute(
            delete(LinkModel).where(LinkModel.id == link_id, LinkModel.user_id == user_id)
        )

    async def delete_all_for_user(self, user_id: UUID) -> None:
        await self._session.execute(delete(LinkModel).where(LinkModel.user_id == user_id))


# ── Mappers ───────────────────────────────────────────────────────────────────

def _to_profile(m: ProfileModel) -> Profile:
    return Profile(
        id=m.id,
        username=Username(m.username),
        display_name=m.display_name,
        bio=m.bio,
        avatar_url=m.avatar_url,
        verified=m.verified,
        theme_settings=dict(m.theme_settings or {}),
        created_at=m.created_at,
        updated_at=m.updated_at,
    )


def _to_link(m: LinkModel) -> Link:
    return Link(
        id=m.id,
        user_id=m.user_id,
        title=m.title,
        url=LinkUrl(m.url),
        position=m.position,
        created_at=m.created_at,
        updated_at=m.updated_at,
    )
