# ==============================
# Profile Value Object Tests
# ==============================
from __future__ import annotations

from uuid import uuid4

import pytest

from linkbio.domain.profile.entities import Link, move_link, renumber
from linkbio.domain.profile.username import CHARSET_ERROR, DASH_BOUNDARY_ERROR, MIN_LENGTH_ERROR
from linkbio.domain.profile.value_objects import LinkUrl, Username


def _links(count: int) -> list[Link]:
    owner = uuid4()
    return [
        Link(id=uuid4(), user_id=owner, title=f"link {i}", url=LinkUrl(f"https://example.com/{i}"), position=i)
        for i in range(count)
    ]


def test_username_accepts_canonical_value() -> None:
    assert str(Username("john-doe")) == "john-doe"


def test_username_allows_reserved_words_when_reading_back() -> None:
    assert str(Username("admin")) == "admin"


@pytest.mark.parametrize(
    ("value", "message"),
    [
        ("ab", MIN_LENGTH_ERROR),
        ("-abc", DASH_BOUNDARY_ERROR),
        ("John", CHARSET_ERROR),
        ("a--b", CHARSET_ERROR),
    ],
)
def test_username_rejects_non_canonical_values(value: str, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        Username(value)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("example.com", "https://example.com"),
        ("  example.com/path  ", "https://example.com/path"),
        ("http://example.com", "http://example.com"),
        ("https://example.com/a?b=c", "https://example.com/a?b=c"),
    ],
)
def test_link_url_parse_defaults_to_https(raw: str, expected: str) -> None:
    assert str(LinkUrl.parse(raw)) == expected


@pytest.mark.parametrize("raw", ["", "   ", "not a url", "https://"])
def test_link_url_parse_rejects_invalid_input(raw: str) -> None:
    with pytest.raises(ValueError):
        LinkUrl.parse(raw)


@pytest.mark.parametrize("value", ["example.com", "ftp://example.com", "javascript:alert(1)"])
def test_link_url_requires_http_scheme(value: str) -> None:
    with pytest.raises(ValueError):
        LinkUrl(value)


def test_move_link_moves_down_and_renumbers() -> None:
    links = _links(4)
    ids = [link.id for link in links]
    moved = move_link(links, 0, 2)
    assert [link.id for link in moved] == [ids[1], ids[2], ids[0], ids[3]]
    assert [link.position for link in moved] == [0, 1, 2, 3]


def test_move_link_moves_up() -> None:
    links = _links(3)
    ids = [link.id for link in links]
    moved = move_link(links, 2, 0)
    assert [link.id for link in moved] == [ids[2], ids[0], ids[1]]


@pytest.mark.parametrize(("old", "new"), [(-1, 0), (0, 3), (3, 0)])
def test_move_link_rejects_out_of_range(old: int, new: int) -> None:
    with pytest.raises(IndexError):
        move_link(_links(3), old, new)


def test_renumber_closes_gaps() -> None:
    links = _links(3)
    links[0].position, links[1].position, links[2].position = 4, 9, 12
    assert [link.position for link in renumber(links)] == [0, 1, 2]
