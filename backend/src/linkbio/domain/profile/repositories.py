"""Repository interfaces for the Profile bounded context."""
from typing import Protocol
from uuid import UUID

from .entities import Link, Profile


class UsernameConflictError(Exception):
    """Raised by a profile store when a write collides with an existing username."""


class IProfileRepository(Protocol):
    async def get_by_id(self, user_id: UUID) -> Profile | None: ...

    async def get_by_username(self, username: str) -> Profile | None: ...

    async def username_exists(self, username: str) -> bool: ...

    async def list_all(self) -> list[Profile]: ...

    async def save(self, profile: Profile) -> Profile: ...

    async def delete(self, user_id: UUID) -> None: ...


class ILinkRepository(Protocol):
    async def get_by_id(self, link_id: UUID, user_id: UUID) -> Link | None: ...

    async def list_by_user(self, user_id: UUID) -> list[Link]: ...

    async def save(self, link: Link) -> Link: ...

    async def save_positions(self, links: list[Link]) -> None: ...

    async def delete(self, link_id: UUID, user_id: UUID) -> None: ...

    async def delete_all_for_user(self, user_id: UUID) -> None: ...
