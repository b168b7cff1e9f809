"""One object per request that wires repositories, settings and storage into
the application use cases. Routers and the websocket editor only talk to it.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any
from uuid import UUID

from linkbio.application.identity import commands as id_commands
from linkbio.application.identity import oauth as id_oauth
from linkbio.application.identity import queries as id_queries
from linkbio.application.profile import commands as profile_commands
from linkbio.application.profile import qr_code
from linkbio.application.profile import queries as profile_queries
from linkbio.application.profile import sitemap
from linkbio.config import Settings
from linkbio.domain.identity.entities import User
from linkbio.domain.profile.entities import Link, Profile

if TYPE_CHECKING:
    from linkbio.application.identity.commands import SessionResult
    from linkbio.application.identity.oauth import CodeExchange, OAuthCallbackResult
    from linkbio.application.profile.commands import AvatarStorage, UsernameCheck
    from linkbio.application.profile.qr_code import ProfileQrCode
    from linkbio.application.profile.queries import PublicProfile


class AdminRequiredError(Exception):
    pass


class LinkBioFacade:
    """Built per request by ``interfaces.dependencies``."""

    def __init__(
        self,
        settings: Settings,
        user_repo,
        session_repo,
        profile_repo,
        link_repo,
        storage: "AvatarStorage",
    ) -> None:
        self._settings = settings
        self._policy = settings.username_policy()
        self._user_repo = user_repo
        self._session_repo = session_repo
        self._profile_repo = profile_repo
        self._link_repo = link_repo
        self._storage = storage

    # ── Identity ──────────────────────────────────────────────────────────────

    async def register(
        self, email: str, password: str, username: str, display_name: str | None = None,
        ip_address: str | None = None, user_agent: str | None = None,
    ) -> "SessionResult":
        return await id_commands.register_user(
            email=email, password=password, username=username, display_name=display_name,
            policy=self._policy, user_repo=self._user_repo,
            session_repo=self._session_repo, profile_repo=self._profile_repo,
            ip_address=ip_address, user_agent=user_agent,
        )

    async def login(
        self, username_or_email: str, password: str,
        ip_address: str | None = None, user_agent: str | None = None,
    ) -> "SessionResult":
        return await id_commands.login_user(
            username_or_email=username_or_email, password=password,
            user_repo=self._user_repo, session_repo=self._session_repo,
            profile_repo=self._profile_repo,
            ip_address=ip_address, user_agent=user_agent,
        )

    async def logout(self, token: str) -> None:
        await id_commands.logout_user(token=token, session_repo=self._session_repo)

    async def get_current_user(self, user_id: UUID) -> User | None:
        return await id_queries.get_user_by_id(user_id, self._user_repo)

    async def is_session_active(self, jti_hash: str) -> bool:
        session = await self._session_repo.get_by_jti_hash(jti_hash)
        return session is not None and session.is_active

    async def oauth_callback(
        self, origin: str, code: str | None, flow: str | None, next_path: str | None,
        exchange: "CodeExchange",
        ip_address: str | None = None, user_agent: str | None = None,
    ) -> "OAuthCallbackResult":
        return await id_oauth.handle_oauth_callback(
            origin=origin, code=code, flow=flow, next_path=next_path, exchange=exchange,
            user_repo=self._user_repo, session_repo=self._session_repo,
            profile_repo=self._profile_repo,
            ip_address=ip_address, user_agent=user_agent,
        )

    # ── Usernames & profiles ──────────────────────────────────────────────────

    async def check_username(self, raw: str) -> "UsernameCheck":
        return await profile_commands.check_username(
            raw=raw, policy=self._policy, profile_repo=self._profile_repo,
        )

    async def create_profile(
        self, user_id: UUID, username: str, display_name: str | None = None,
        avatar_url: str | None = None,
    ) -> Profile:
        return await profile_commands.create_profile(
            user_id=user_id, username=username, display_name=display_name,
            avatar_url=avatar_url, policy=self._policy, profile_repo=self._profile_repo,
        )

    async def get_public_profile(self, username: str) -> "PublicProfile | None":
        return await profile_queries.get_public_profile(username, self._profile_repo, self._link_repo)

    async def get_own_profile(self, user_id: UUID) -> Profile | None:
        return await profile_queries.get_own_profile(user_id, self._profile_repo)

    async def profile_qr_code(self, username: str, scale: int = qr_code.DEFAULT_SCALE) -> "ProfileQrCode | None":
        return await qr_code.generate_profile_qr(
            username=username, base_url=self._settings.public_base_url,
            profile_repo=self._profile_repo, scale=scale,
        )

    async def update_profile(self, user_id: UUID, **changes: Any) -> Profile:
        return await profile_commands.update_profile(
            user_id=user_id, policy=self._policy, profile_repo=self._profile_repo, **changes,
        )

    async def upload_avatar(self, user_id: UUID, content_type: str, data: bytes) -> Profile:
        return await profile_commands.upload_avatar(
            user_id=user_id, content_type=content_type, data=data,
            allowed_types=self._settings.avatar_allowed_types,
            max_size_mb=self._settings.avatar_max_size_mb,
            storage=self._storage, profile_repo=self._profile_repo,
        )

    # ── Links ─────────────────────────────────────────────────────────────────

    async def list_links(self, user_id: UUID) -> list[Link]:
        return await self._link_repo.list_by_user(user_id)

    async def add_link(self, user_id: UUID, title: str, url: str) -> Link:
        return await profile_commands.add_link(
            user_id=user_id, title=title, url=url,
            profile_repo=self._profile_repo, link_repo=self._link_repo,
        )

    async def update_link(self, link_id: UUID, user_id: UUID, **kwargs: Any) -> Link:
        return await profile_commands.update_link(
            link_id=link_id, user_id=user_id, link_repo=self._link_repo, **kwargs,
        )

    async def delete_link(self, link_id: UUID, user_id: UUID) -> None:
        await profile_commands.delete_link(link_id=link_id, user_id=user_id, link_repo=self._link_repo)

    async def reorder_links(self, user_id: UUID, old_index: int, new_index: int) -> list[Link]:
        return await profile_commands.reorder_links(
            user_id=user_id, old_index=old_index, new_index=new_index, link_repo=self._link_repo,
        )

    # ── Admin ─────────────────────────────────────────────────────────────────

    async def require_admin(self, user_id: UUID) -> User:
        user = await self.get_current_user(user_id)
        if user is None or not self._settings.is_admin_email(str(user.email)):
            raise AdminRequiredError("Admin access required")
        return user

    async def list_profiles(self, admin_id: UUID) -> list[Profile]:
        await self.require_admin(admin_id)
        return await profile_queries.list_profiles(self._profile_repo)

    async def delete_user(self, admin_id: UUID, user_id: UUID) -> None:
        await self.require_admin(admin_id)
        await profile_commands.delete_user(
            user_id=user_id, user_repo=self._user_repo, session_repo=self._session_repo,
            profile_repo=self._profile_repo, link_repo=self._link_repo, storage=self._storage,
        )

    # ── Sitemap ───────────────────────────────────────────────────────────────

    async def sitemap_xml(self) -> str:
        entries = await sitemap.generate_sitemap(
            base_url=self._settings.public_base_url,
            now=datetime.now(timezone.utc),
            profile_repo=self._profile_repo,
        )
        return sitemap.render_sitemap_xml(entries)
