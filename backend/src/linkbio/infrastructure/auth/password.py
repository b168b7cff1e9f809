"""Password hashing (argon2-cffi, Argon2id)."""
import secrets

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from linkbio.domain.identity.value_objects import PasswordHash

_hasher = PasswordHasher(time_cost=2, memory_cost=64 * 1024, parallelism=2, hash_len=32, salt_len=16)


def hash_password(raw_password: str) -> PasswordHash:
    return PasswordHash(_hasher.hash(raw_password))


def unusable_password() -> PasswordHash:
    """Hash of a throwaway secret; OAuth-created accounts cannot sign in with a password."""
    return hash_password(secrets.token_urlsafe(32))


def check_password(raw_password: str, stored: PasswordHash) -> PasswordHash | None:
    """Verify ``raw_password``. Returns the hash to keep, or None on mismatch.

    The returned hash differs from ``stored`` when the stored one was made
    with older parameters and has been upgraded.
    """
    try:
        _hasher.verify(str(stored), raw_password)
    except (VerificationError, InvalidHashError):
        return None
    if _hasher.check_needs_rehash(str(stored)):
        return hash_password(raw_password)
    return stored
