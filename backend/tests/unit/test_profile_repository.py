# ==============================
# Profile Repository Savepoint Tests
# ==============================
from __future__ import annotations

import asyncio
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError

from linkbio.domain.profile.entities import Profile
from linkbio.domain.profile.repositories import UsernameConflictError
from linkbio.domain.profile.value_objects import Username
from linkbio.infrastructure.database.repositories.profile import ProfileRepository


class _Savepoint:
    def __init__(self, session: "RecordingSession") -> None:
        self._session = session

    async def __aenter__(self) -> "_Savepoint":
        self._session.calls.append("savepoint")
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None and self._session.duplicate:
            self._session.calls.append("rollback savepoint")
            raise IntegrityError("INSERT INTO profile.profiles", {}, Exception("duplicate key"))
        self._session.calls.append("release savepoint")
        return False


class RecordingSession:
    """Stands in for AsyncSession; only records the order of calls."""

    def __init__(self, duplicate: bool = False) -> None:
        self.duplicate = duplicate
        self.calls: list[str] = []

    def begin_nested(self) -> _Savepoint:
        return _Savepoint(self)

    async def get(self, model, key):
        self.calls.append("get")
        return None

    def add(self, instance) -> None:
        self.calls.append("add")


def _profile() -> Profile:
    return Profile(id=uuid4(), username=Username("john-doe"))


def test_save_changes_rows_inside_the_savepoint() -> None:
    session = RecordingSession()
    asyncio.run(ProfileRepository(session).save(_profile()))
    assert session.calls == ["savepoint", "get", "add", "release savepoint"]


def test_duplicate_username_maps_to_conflict() -> None:
    session = RecordingSession(duplicate=True)
    with pytest.raises(UsernameConflictError):
        asyncio.run(ProfileRepository(session).save(_profile()))
    assert session.calls == ["savepoint", "get", "add", "rollback savepoint"]
