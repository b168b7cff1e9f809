"""Immutable value objects for the Profile bounded context."""
from dataclasses import dataclass
from urllib.parse import urlparse

from .username import UsernamePolicy

# Shape-only checks for stored usernames; reserved words are a policy decision
# made when a username is claimed, not when it is read back.
_SHAPE_POLICY = UsernamePolicy(reserved=frozenset())


@dataclass(frozen=True)
class Username:
    value: str

    def __post_init__(self) -> None:
        result = _SHAPE_POLICY.validate_canonical(self.value)
        if not result.is_valid:
            raise ValueError(result.primary_error)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class LinkUrl:
    """An absolute http(s) URL. Use ``LinkUrl.parse`` for user input."""
    value: str

    def __post_init__(self) -> None:
        parsed = urlparse(self.value)
        if (
            parsed.scheme not in ("http", "https")
            or not parsed.hostname
            or any(c.isspace() for c in self.value)
        ):
            raise ValueError(f"Invalid URL: {self.value}")

    @classmethod
    def parse(cls, raw: str) -> "LinkUrl":
        """Trim and default the scheme to https when none is given."""
        value = raw.strip()
        if not value.startswith(("http://", "https://")):
            value = "https://" + value
        return cls(value)

    def __str__(self) -> str:
        return self.value
