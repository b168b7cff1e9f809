"""Session tokens (python-jose). Every token's ``jti`` is recorded as a UserSession."""
import hashlib
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

from jose import JWTError, jwt

from linkbio.config import get_settings


@dataclass(frozen=True)
class IssuedToken:
    token: str
    jti: str
    expires_at: datetime


@dataclass(frozen=True)
class TokenClaims:
    user_id: UUID
    jti: str


def create_access_token(user_id: UUID) -> IssuedToken:
    settings = get_settings()
    issued_at = datetime.now(timezone.utc)
    expires_at = issued_at + timedelta(minutes=settings.jwt_access_token_expire_minutes)
    jti = uuid4().hex
    token = jwt.encode(
        {"sub": str(user_id), "jti": jti, "iat": issued_at, "exp": expires_at, "iss": settings.app_name},
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return IssuedToken(token=token, jti=jti, expires_at=expires_at)


def read_claims(token: str) -> TokenClaims:
    """Verify signature, expiry and issuer. Raises JWTError on any failure."""
    settings = get_settings()
    payload = jwt.decode(
        token, settings.secret_key, algorithms=[settings.jwt_algorithm], issuer=settings.app_name,
    )
    try:
        return TokenClaims(user_id=UUID(payload["sub"]), jti=str(payload["jti"]))
    except (KeyError, ValueError) as exc:
        raise JWTError(f"Malformed token claims: {exc}") from exc


def hash_jti(jti: str) -> str:
    """Only the sha256 of a ``jti`` is stored."""
    return hashlib.sha256(jti.encode()).hexdigest()
