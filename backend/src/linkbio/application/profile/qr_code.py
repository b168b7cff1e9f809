"""Downloadable QR codes that point at a public profile page."""
from __future__ import annotations

import io
from dataclasses import dataclass
from urllib.parse import quote

import segno

from linkbio.domain.profile.repositories import IProfileRepository

DEFAULT_SCALE = 8
QUIET_ZONE = 4


@dataclass(frozen=True)
class ProfileQrCode:
    url: str
    filename: str
    png: bytes


def profile_url(base_url: str, username: str) -> str:
    return f"{base_url.rstrip('/')}/{quote(username, safe='')}"


def render_qr_png(content: str, scale: int = DEFAULT_SCALE) -> bytes:
    # black on white so the code scans after printing
    qr = segno.make_qr(content, error="m")
    out = io.BytesIO()
    qr.save(out, kind="png", scale=scale, border=QUIET_ZONE, dark="#000000", light="#ffffff")
    return out.getvalue()


async def generate_profile_qr(
    *,
    username: str,
    base_url: str,
    profile_repo: IProfileRepository,
    scale: int = DEFAULT_SCALE,
) -> ProfileQrCode | None:
    """None when no profile has this username (looked up case-insensitively)."""
    profile = await profile_repo.get_by_username(username.lower())
    if profile is None:
        return None
    name = str(profile.username)
    url = profile_url(base_url, name)
    return ProfileQrCode(url=url, filename=f"{name}-qr-code.png", png=render_qr_png(url, scale))
