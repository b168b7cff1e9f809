# ==============================
# Sitemap Tests
# ==============================
from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from uuid import uuid4
from xml.etree import ElementTree as ET

from linkbio.application.profile.sitemap import (
    SitemapEntry,
    build_sitemap,
    generate_sitemap,
    render_sitemap_xml,
)
from linkbio.domain.profile.entities import Profile
from linkbio.domain.profile.value_objects import Username

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
NS = {"sm": "http://www.sitemaps.org/schemas/sitemap/0.9"}


def test_build_sitemap_lists_static_pages_then_profiles() -> None:
    updated = datetime(2024, 4, 1, tzinfo=timezone.utc)
    profile = Profile(id=uuid4(), username=Username("john-doe"), updated_at=updated)
    entries = build_sitemap([profile], "https://123l.ink/", NOW)
    assert [e.url for e in entries] == [
        "https://123l.ink",
        "https://123l.ink/auth/setup-profile",
        "https://123l.ink/john-doe",
    ]
    assert [e.priority for e in entries] == [1.0, 0.7, 0.8]
    assert [e.change_frequency for e in entries] == ["weekly", "monthly", "weekly"]
    assert entries[2].last_modified == updated


def test_generate_sitemap_falls_back_to_static_pages(store) -> None:
    store.profiles.fail_list_all = True
    entries = asyncio.run(generate_sitemap(base_url="https://123l.ink", now=NOW, profile_repo=store.profiles))
    assert [e.url for e in entries] == ["https://123l.ink", "https://123l.ink/auth/setup-profile"]


def test_render_sitemap_xml() -> None:
    xml = render_sitemap_xml([SitemapEntry("https://123l.ink/a&b", NOW, "weekly", 0.8)])
    assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?>')
    root = ET.fromstring(xml.split("\n", 1)[1])
    url = root.find("sm:url", NS)
    assert url.find("sm:loc", NS).text == "https://123l.ink/a&b"
    assert url.find("sm:lastmod", NS).text == NOW.isoformat()
    assert url.find("sm:priority", NS).text == "0.8"
