from .identity import UserModel, UserSessionModel
from .profile import LinkModel, ProfileModel

__all__ = [
    "UserModel",
    "UserSessionModel",
    "ProfileModel",
    "LinkModel",
]
