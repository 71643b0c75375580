"""
Test fixtures for source client tests.

Builds Algolia JSON payloads and Reddit Atom feeds shaped like the
real APIs return them.
"""

from collections.abc import Callable
from xml.sax.saxutils import escape

import httpx
import pytest

ATOM_NS = "http://www.w3.org/2005/Atom"


def story_hit(object_id="12345", title="Notion is great", **overrides) -> dict:
    """One story hit as returned by /search?tags=story."""
    hit = {
        "objectID": object_id,
        "title": title,
        "url": "https://example.com/notion",
        "author": "pg",
        "points": 120,
        "num_comments": 42,
        "created_at": "2024-01-15T10:00:00.000Z",
        "story_text": None,
    }
    hit.update(overrides)
    return hit


def comment_hit(object_id="22222", text="<p>I use Notion every single day</p>", **overrides) -> dict:
    """One comment hit as returned by /search?tags=comment,story_N."""
    hit = {
        "objectID": object_id,
        "comment_text": text,
        "author": "commenter",
        "created_at": "2024-01-15T11:00:00.000Z",
    }
    hit.update(overrides)
    return hit


def hits_response(*hits: dict) -> httpx.Response:
    return httpx.Response(200, json={"hits": list(hits), "nbHits": len(hits)})


def atom_entry(
    entry_id="t3_abc123",
    title="Notion vs Obsidian",
    content="&lt;p&gt;Which one should I pick for notes?&lt;/p&gt;",
    author="/u/someone",
    subreddit="r/productivity",
    link="https://www.reddit.com/r/productivity/comments/abc123/notion_vs_obsidian/",
    updated="2024-01-15T10:00:00+00:00",
) -> str:
    """One Atom <entry>. content must already be XML-escaped, like Reddit sends it."""
    category = f'<category term="{subreddit[2:]}" label="{subreddit}"/>' if subreddit else ""
    title_el = f"<title>{escape(title)}</title>" if title is not None else ""
    link_el = f'<link href="{link}"/>' if link else ""
    return (
        "<entry>"
        f"<author><name>{author}</name><uri>https://www.reddit.com{author}</uri></author>"
        f"{category}"
        f'<content type="html">{content}</content>'
        f"<id>{entry_id}</id>"
        f"{link_el}"
        f"<updated>{updated}</updated>"
        f"{title_el}"
        "</entry>"
    )


def comment_entry(entry_id="t1_c1", content="&lt;p&gt;Notion databases changed my life&lt;/p&gt;", **kwargs) -> str:
    """One comment entry of a thread feed."""
    kwargs.setdefault(
        "link",
        f"https://www.reddit.com/r/productivity/comments/abc123/notion_vs_obsidian/{entry_id[3:]}/",
    )
    kwargs.setdefault("title", "/u/commenter on Notion vs Obsidian")
    kwargs.setdefault("author", "/u/commenter")
    return atom_entry(entry_id=entry_id, content=content, **kwargs)


def atom_feed(*entries: str) -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f'<feed xmlns="{ATOM_NS}" xmlns:media="http://search.yahoo.com/mrss/">'
        '<category term="productivity" label="r/productivity"/>'
        "<updated>2024-01-15T12:00:00+00:00</updated>"
        "<title>search results</title>"
        f"{''.join(entries)}"
        "</feed>"
    )


def feed_response(*entries: str) -> httpx.Response:
    return httpx.Response(
        200,
        content=atom_feed(*entries).encode("utf-8"),
        headers={"content-type": "application/atom+xml; charset=UTF-8"},
    )


@pytest.fixture
def hn_payload() -> Callable[..., httpx.Response]:
    """Builder for Algolia hits responses."""
    return hits_response


@pytest.fixture
def story() -> Callable[..., dict]:
    return story_hit


@pytest.fixture
def comment() -> Callable[..., dict]:
    return comment_hit


@pytest.fixture
def reddit_feed() -> Callable[..., httpx.Response]:
    """Builder for Atom feed responses."""
    return feed_response


@pytest.fixture
def post_entry() -> Callable[..., str]:
    return atom_entry


@pytest.fixture
def reply_entry() -> Callable[..., str]:
    return comment_entry


@pytest.fixture
def feed_document() -> Callable[..., str]:
    """Builder for raw Atom feed documents."""
    return atom_feed
