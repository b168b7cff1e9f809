"""Username sanitization and validation rules for public profile URLs.

Pure functions only: no I/O, no logging, never raises. Availability against
the profile store is checked by the application layer.
"""
from __future__ import annotations

from dataclasses import dataclass
import re

DEFAULT_BASE_PATH = "123l.ink"

DEFAULT_RESERVED_USERNAMES: frozenset[str] = frozenset({
    "admin", "api", "www", "mail", "ftp", "localhost", "root",
    "support", "help", "about", "contact", "privacy", "terms",
    "login", "signup", "signin", "register", "dashboard", "profile",
    "settings", "account", "billing", "pricing", "features",
    "blog", "news", "docs", "documentation", "status", "health",
})

MIN_LENGTH_ERROR = "Username must be at least 3 characters long"
MAX_LENGTH_ERROR = "Username must be 30 characters or less"
RESERVED_ERROR = "This username is reserved and cannot be used"
DASH_BOUNDARY_ERROR = "Username cannot start or end with a dash"
CHARSET_ERROR = "Username may only contain lowercase letters, numbers, and dashes"

_WHITESPACE_RUN = re.compile(r"\s+")
_INVALID_CHARS = re.compile(r"[^a-z0-9-]")
_DASH_RUN = re.compile(r"-+")
_BOUNDARY_DASHES = re.compile(r"^-+|-+$")
_SPECIAL_CHARS = re.compile(r"[^a-zA-Z0-9\s_-]")


def sanitize(raw: str) -> str:
    """Normalize free-form input into the canonical ``[a-z0-9-]`` token.

    The order matters: whitespace and underscores become dashes before the
    invalid-character strip, and dash runs are collapsed after it.
    """
    value = raw.lower().strip()
    value = _WHITESPACE_RUN.sub("-", value)
    value = value.replace("_", "-")
    value = _INVALID_CHARS.sub("", value)
    value = _DASH_RUN.sub("-", value)
    return _BOUNDARY_DASHES.sub("", value)


@dataclass(frozen=True)
class ValidationResult:
    sanitized: str
    is_valid: bool
    errors: tuple[str, ...]
    preview: str

    @property
    def primary_error(self) -> str | None:
        """The single error shown to the user, if any."""
        return self.errors[0] if self.errors else None


@dataclass(frozen=True)
class UsernamePolicy:
    """Rule set for usernames. Reserved words and base path are injected."""
    reserved: frozenset[str] = DEFAULT_RESERVED_USERNAMES
    base_path: str = DEFAULT_BASE_PATH
    min_length: int = 3
    max_length: int = 30

    def validate(self, raw: str) -> ValidationResult:
        """Sanitize ``raw`` and check the result against the rule set."""
        return self._check(sanitize(raw))

    def validate_canonical(self, value: str) -> ValidationResult:
        """Check a value that is expected to already be canonical.

        Nothing is rewritten, so values that never went through ``sanitize``
        (stored rows, client-supplied tokens) are reported rather than fixed.
        """
        result = self._check(value)
        errors = list(result.errors)
        if _INVALID_CHARS.search(value) or "--" in value:
            errors.append(CHARSET_ERROR)
        return self._result(value, errors)

    def _check(self, value: str) -> ValidationResult:
        errors: list[str] = []
        if len(value) < self.min_length:
            errors.append(MIN_LENGTH_ERROR)
        if len(value) > self.max_length:
            errors.append(MAX_LENGTH_ERROR)
        if value in self.reserved:
            errors.append(RESERVED_ERROR)
        # Unreachable after sanitize(); reachable through validate_canonical().
        if value.startswith("-") or value.endswith("-"):
            errors.append(DASH_BOUNDARY_ERROR)
        return self._result(value, errors)

    def _result(self, value: str, errors: list[str]) -> ValidationResult:
        return ValidationResult(
            sanitized=value,
            is_valid=not errors and len(value) >= self.min_length,
            errors=tuple(errors),
            preview=f"{self.base_path}/{value}",
        )


def describe_transformation(raw: str, sanitized: str | None = None) -> str | None:
    """Describe what sanitization did to ``raw``, or None if nothing visible.

    Every category is checked against the original input. ``sanitized`` is
    accepted for call-site symmetry with ``validate`` but not consulted.
    """
    changes: list[str] = []
    if raw != raw.lower():
        changes.append("converted to lowercase")
    if " " in raw:
        changes.append("spaces replaced with dashes")
    if "_" in raw:
        changes.append("underscores replaced with dashes")
    if _SPECIAL_CHARS.search(raw):
        changes.append("special characters removed")
    if not changes:
        return None
    return f"Automatically {', '.join(changes)}"


default_policy = UsernamePolicy()


def validate(raw: str) -> ValidationResult:
    return default_policy.validate(raw)
