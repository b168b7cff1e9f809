from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from linkbio.domain.profile.username import (
    DEFAULT_BASE_PATH,
    DEFAULT_RESERVED_USERNAMES,
    UsernamePolicy,
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database
    database_url: str
    database_pool_size: int = 5
    database_max_overflow: int = 10

    # Security
    secret_key: str
    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_minutes: int = 60
    session_cookie_name: str = "linkbio_session"

    # App
    environment: str = "development"
    debug: bool = False
    app_name: str = "LinkBio"
    app_version: str = "0.1.0"
    log_level: str = "INFO"

    # Public site
    public_base_url: str = "https://123l.ink"
    username_base_path: str = DEFAULT_BASE_PATH
    reserved_usernames: list[str] = sorted(DEFAULT_RESERVED_USERNAMES)

    # Admin allow-list, JSON array in .env: ADMIN_EMAILS=["you@example.com"]
    admin_emails: list[str] = []

    # OAuth provider (authorization-code flow); unset client id disables it
    oauth_client_id: str | None = None
    oauth_client_secret: str | None = None
    oauth_token_url: str | None = None
    oauth_userinfo_url: str | None = None
    oauth_redirect_uri: str | None = None
    oauth_timeout_seconds: float = 10.0

    # Storage
    storage_path: Path = Path("./storage")
    media_url_prefix: str = "/media"
    avatar_max_size_mb: int = 5
    avatar_allowed_types: list[str] = ["image/jpeg", "image/png", "image/gif", "image/webp"]

    # Editing
    profile_save_delay_seconds: float = 3.0

    # CORS, JSON array in .env: CORS_ORIGINS=["http://localhost:3000"]
    cors_origins: list[str] = ["http://localhost:3000"]

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def oauth_enabled(self) -> bool:
        return bool(self.oauth_client_id and self.oauth_token_url and self.oauth_userinfo_url)

    def is_admin_email(self, email: str) -> bool:
        return email.lower() in {e.lower() for e in self.admin_emails}

    def username_policy(self) -> UsernamePolicy:
        return UsernamePolicy(
            reserved=frozenset(w.lower() for w in self.reserved_usernames),
            base_path=self.username_base_path,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
