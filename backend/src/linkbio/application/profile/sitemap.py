"""sitemap.xml generation for the public profile pages."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from urllib.parse import quote
from xml.etree import ElementTree as ET

from linkbio.domain.profile.entities import Profile
from linkbio.domain.profile.repositories import IProfileRepository

logger = logging.getLogger(__name__)

_SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"


@dataclass(frozen=True)
class SitemapEntry:
    url: str
    last_modified: datetime
    change_frequency: str
    priority: float


def static_entries(base_url: str, now: datetime) -> list[SitemapEntry]:
    base_url = base_url.rstrip("/")
    return [
        SitemapEntry(base_url, now, "weekly", 1.0),
        SitemapEntry(f"{base_url}/auth/setup-profile", now, "monthly", 0.7),
    ]


def build_sitemap(profiles: list[Profile], base_url: str, now: datetime) -> list[SitemapEntry]:
    """Static pages first, then one entry per profile."""
    base_url = base_url.rstrip("/")
    entries = static_entries(base_url, now)
    entries.extend(
        SitemapEntry(
            url=f"{base_url}/{quote(str(p.username), safe='')}",
            last_modified=p.updated_at or now,
            change_frequency="weekly",
            priority=0.8,
        )
        for p in profiles
    )
    return entries


async def generate_sitemap(
    *,
    base_url: str,
    now: datetime,
    profile_repo: IProfileRepository,
) -> list[SitemapEntry]:
    """Build the sitemap, degrading to the static pages if the store fails."""
    try:
        profiles = await profile_repo.list_all()
    except Exception:
        logger.exception("Error fetching profiles for sitemap")
        return static_entries(base_url, now)
    return build_sitemap(profiles, base_url, now)


def render_sitemap_xml(entries: list[SitemapEntry]) -> str:
    urlset = ET.Element("urlset", xmlns=_SITEMAP_NS)
    for entry in entries:
        url = ET.SubElement(urlset, "url")
        ET.SubElement(url, "loc").text = entry.url
        ET.SubElement(url, "lastmod").text = entry.last_modified.isoformat()
        ET.SubElement(url, "changefreq").text = entry.change_frequency
        ET.SubElement(url, "priority").text = f"{entry.priority:.1f}"
    body = ET.tostring(urlset, encoding="unicode")
    return f'<?xml version="1.0" encoding="UTF-8"?>\n{body}'
