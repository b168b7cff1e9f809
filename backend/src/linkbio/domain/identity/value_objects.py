"""Account value objects."""
from dataclasses import dataclass
import re

_EMAIL_PATTERN = re.compile(r"^[a-z0-9._%+\-]+@[a-z0-9.\-]+\.[a-z]{2,}$")


@dataclass(frozen=True)
class Email:
    """Always stored trimmed and lower-cased; use ``Email.parse`` for user input."""
    value: str

    def __post_init__(self) -> None:
        if not _EMAIL_PATTERN.match(self.value):
            raise ValueError(f"Invalid email address: {self.value}")

    @classmethod
    def parse(cls, raw: str) -> "Email":
        return cls(raw.strip().lower())

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PasswordHash:
    value: str

    def __str__(self) -> str:
        return self.value
