"""Identity use-case queries."""
from uuid import UUID

from linkbio.domain.identity.entities import User
from linkbio.domain.identity.repositories import IUserRepository


async def get_user_by_id(user_id: UUID, user_repo: IUserRepository) -> User | None:
    user = await user_repo.get_by_id(user_id)
    if user is None or user.is_deleted:
        return None
    return user
