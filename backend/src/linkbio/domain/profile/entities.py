"""Domain entities for the Profile bounded context."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from .value_objects import LinkUrl, Username


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Profile:
    """Public page owned by one user. ``id`` is the owning user's id."""
    id: UUID
    username: Username
    display_name: str | None = None
    bio: str | None = None
    avatar_url: str | None = None
    verified: bool = False
    theme_settings: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def touch(self) -> None:
        self.updated_at = _utcnow()


@dataclass
class Link:
    id: UUID
    user_id: UUID
    title: str
    url: LinkUrl
    position: int = 0
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)


def move_link(links: list[Link], old_index: int, new_index: int) -> list[Link]:
    """Return a new list with one link moved, positions renumbered 0..n-1."""
    if not (0 <= old_index < len(links)) or not (0 <= new_index < len(links)):
        raise IndexError("Link index out of range")
    moved = list(links)
    moved.insert(new_index, moved.pop(old_index))
    return renumber(moved)


def renumber(links: list[Link]) -> list[Link]:
    for position, link in enumerate(links):
        link.position = position
    return links
