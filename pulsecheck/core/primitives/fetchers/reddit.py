"""
Reddit client using Reddit's public RSS/Atom feeds.

No authentication is required. Reddit rate limits anonymous clients
aggressively, so requests carry a descriptive User-Agent and comment
threads are fetched one at a time with a short delay.

This client:
1. Searches posts (optionally within one subreddit)
2. Fetches the comment feed of a post by permalink
3. Normalizes the HTML bodies embedded in feed entries
4. Drops the post entry, deleted comments and short comments
"""

import asyncio
import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from urllib.parse import urlparse

import httpx

from pulsecheck.core.config.loader import get_sources_config, resolve_setting
from pulsecheck.core.primitives.exceptions import ErrorKind, RedditApiError
from pulsecheck.core.primitives.fetcher import Fetcher, FetcherConfig, SleepFunc
from pulsecheck.core.primitives.fetchers.base import (
    BaseSourceClient,
    Quote,
    SearchQuery,
    SourceName,
    cache_key,
)
from pulsecheck.core.primitives.normalizer import (
    DEFAULT_MIN_LENGTH,
    ContentFilter,
    normalize_text,
)
from pulsecheck.core.primitives.retry import Backoff, RetryPolicy
from pulsecheck.core.storage.base import BaseCache, CacheConfig
from pulsecheck.core.storage.memory_cache import TTLCache
from pulsecheck.core.utils.time import parse_timestamp

logger = logging.getLogger(__name__)

REDDIT_BASE = "https://www.reddit.com"
DEFAULT_USER_AGENT = "PulseCheck/1.0 (product sentiment research)"

VALID_SORTS = ("relevance", "hot", "top", "new", "comments")
VALID_TIMES = ("hour", "day", "week", "month", "year", "all")

POST_ID_PATTERN = re.compile(r"comments/([a-z0-9]+)", re.IGNORECASE)


# =============================================================================
# Records
# =============================================================================


@dataclass(frozen=True)
class RedditPost:
    """A post from a search feed."""

    id: str
    title: str
    content: str
    author: str
    subreddit: str
    created_at: datetime | None
    permalink: str

    def to_quote(self) -> Quote:
        """Map onto the report generator's quote shape."""
        text = self.title
        if self.content:
            text = f"{self.title}\n\n{self.content}"
        return Quote(
            text=text,
            source=SourceName.REDDIT,
            author=self.author,
            date=self.created_at,
            url=self.permalink,
        )


@dataclass(frozen=True)
class RedditComment:
    """A comment from a thread feed. post_id refers back to the thread."""

    id: str
    content: str
    author: str
    created_at: datetime | None
    permalink: str
    post_id: str

    def to_quote(self) -> Quote:
        """Map onto the report generator's quote shape."""
        return Quote(
            text=self.content,
            source=SourceName.REDDIT,
            author=self.author,
            date=self.created_at,
            url=self.permalink,
        )


@dataclass(frozen=True)
class RedditSearchResult:
    """Posts returned for a query, in feed order."""

    query: str
    posts: list[RedditPost] = field(default_factory=list)


@dataclass(frozen=True)
class RedditPostWithComments:
    """A post with its filtered comments attached."""

    post: RedditPost
    comments: list[RedditComment] = field(default_factory=list)


@dataclass(frozen=True)
class RedditSearchWithComments:
    """Result of search_with_comments. Both lists follow feed order."""

    query: str
    posts: list[RedditPost]
    posts_with_comments: list[RedditPostWithComments]


# =============================================================================
# Feed parsing
# =============================================================================


@dataclass(frozen=True)
class FeedEntry:
    """Raw fields of one Atom <entry> (or RSS <item>), before normalization."""

    id: str | None
    title: str | None
    author: str | None
    category: str | None
    content: str | None
    link: str | None
    updated: str | None


def _local_name(tag: Any) -> str:
    """Tag name without its XML namespace."""
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def _child(element: ET.Element | None, *names: str) -> ET.Element | None:
    """First direct child whose local name matches one of names, in priority order."""
    if element is None:
        return None
    for name in names:
        for child in element:
            if _local_name(child.tag) == name:
                return child
    return None


def _text(element: ET.Element | None) -> str | None:
    """All text inside an element, or None if absent or blank."""
    if element is None:
        return None
    text = "".join(element.itertext()).strip()
    return text or None


def _parse_atom_entry(entry: ET.Element) -> FeedEntry:
    link = None
    for child in entry:
        if _local_name(child.tag) == "link" and child.get("href"):
            if child.get("rel", "alternate") == "alternate":
                link = child.get("href")
                break
            link = link or child.get("href")

    category = _child(entry, "category")
    category_label = None
    if category is not None:
        category_label = category.get("label") or category.get("term")

    return FeedEntry(
        id=_text(_child(entry, "id")),
        title=_text(_child(entry, "title")),
        author=_text(_child(_child(entry, "author"), "name")),
        category=category_label,
        content=_text(_child(entry, "content", "summary")),
        link=link,
        updated=_text(_child(entry, "updated", "published")),
    )


def _parse_rss_item(item: ET.Element) -> FeedEntry:
    return FeedEntry(
        id=_text(_child(item, "guid")),
        title=_text(_child(item, "title")),
        author=_text(_child(item, "creator", "author")),
        category=_text(_child(item, "category")),
        content=_text(_child(item, "encoded", "description")),
        link=_text(_child(item, "link")),
        updated=_text(_child(item, "pubDate", "date")),
    )


def parse_feed(document: bytes | str) -> list[FeedEntry]:
    """
    Parse an Atom feed (or RSS 2.0 channel) into entries, in document order.

    Namespaced and un-namespaced documents are both accepted.

    Raises:
        RedditApiError: kind=PARSE if the document is not a feed.
    """
    if isinstance(document, str):
        document = document.encode("utf-8")

    try:
        root = ET.fromstring(document.strip())
    except ET.ParseError as e:
        raise RedditApiError(
            f"Malformed feed from Reddit: {e}",
            kind=ErrorKind.PARSE,
        ) from e

    root_name = _local_name(root.tag)
    if root_name == "feed":
        return [
            _parse_atom_entry(child)
            for child in root
            if _local_name(child.tag) == "entry"
        ]
    if root_name == "rss":
        channel = _child(root, "channel")
        if channel is None:
            return []
        return [
            _parse_rss_item(child)
            for child in channel
            if _local_name(child.tag) == "item"
        ]

    raise RedditApiError(
        f"Unexpected document from Reddit: <{root_name}> is not a feed",
        kind=ErrorKind.PARSE,
    )


def extract_post_id(link: str) -> str:
    """Thread id from a permalink (".../comments/abc123/..."), or the link itself."""
    match = POST_ID_PATTERN.search(link)
    return match.group(1) if match else link


def thread_path(permalink: str) -> str:
    """
    Normalize a permalink (absolute URL or path) to a thread path.

    "https://www.reddit.com/r/x/comments/abc/t/" -> "/r/x/comments/abc/t"
    """
    path = permalink.strip()
    if path.startswith(("http://", "https://")):
        path = urlparse(path).path

    path = path.rstrip("/")
    path = path.removesuffix(".rss").rstrip("/")
    if not path:
        raise ValueError(f"Invalid permalink: {permalink!r}")
    if not path.startswith("/"):
        path = f"/{path}"
    return path


def _strip_author(name: str | None) -> str:
    if not name:
        return "[unknown]"
    return name.removeprefix("/u/").removeprefix("u/") or "[unknown]"


def _strip_subreddit(label: str | None) -> str:
    if not label:
        return ""
    return label.removeprefix("/r/").removeprefix("r/").strip("/")


# =============================================================================
# Client
# =============================================================================


@dataclass
class RedditClientConfig:
    """Configuration for RedditClient. Durations are in seconds."""

    base_url: str = REDDIT_BASE
    user_agent: str = DEFAULT_USER_AGENT
    cache_ttl: float = 300.0
    cache_max_entries: int | None = 1024
    max_retries: int = 2
    retry_delay: float = 1.0
    backoff: Backoff = Backoff.EXPONENTIAL
    timeout: float = 30.0
    min_comment_length: int = DEFAULT_MIN_LENGTH
    request_delay: float = 0.3

    @classmethod
    def from_config(cls) -> "RedditClientConfig":
        """
        Load configuration from the sources.reddit config section.

        Environment variables (REDDIT_*) take precedence over config files.
        """
        section = get_sources_config("reddit")
        return cls(
            base_url=resolve_setting(section, "base_url", "REDDIT_BASE_URL", REDDIT_BASE),
            user_agent=resolve_setting(
                section, "user_agent", "REDDIT_USER_AGENT", DEFAULT_USER_AGENT
            ),
            cache_ttl=resolve_setting(section, "cache_ttl", "REDDIT_CACHE_TTL", 300.0, float),
            cache_max_entries=resolve_setting(
                section, "cache_max_entries", "REDDIT_CACHE_MAX_ENTRIES", 1024, int
            ),
            max_retries=resolve_setting(section, "max_retries", "REDDIT_MAX_RETRIES", 2, int),
            retry_delay=resolve_setting(
                section, "retry_delay", "REDDIT_RETRY_DELAY", 1.0, float
            ),
            backoff=resolve_setting(
                section, "backoff", "REDDIT_BACKOFF", Backoff.EXPONENTIAL, Backoff
            ),
            timeout=resolve_setting(section, "timeout", "REDDIT_TIMEOUT", 30.0, float),
            min_comment_length=resolve_setting(
                section,
                "min_comment_length",
                "REDDIT_MIN_COMMENT_LENGTH",
                DEFAULT_MIN_LENGTH,
                int,
            ),
            request_delay=resolve_setting(
                section, "request_delay", "REDDIT_REQUEST_DELAY", 0.3, float
            ),
        )


class RedditClient(BaseSourceClient):
    """
    Fetches posts and comments from Reddit's public feeds.

    Usage:
        client = RedditClient()
        result = await client.search_posts("Notion", limit=10)

        for post in result.posts:
            comments = await client.fetch_comments(post.permalink)
    """

    source = SourceName.REDDIT

    def __init__(
        self,
        config: RedditClientConfig | None = None,
        *,
        cache: BaseCache | None = None,
        sleep: SleepFunc | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the client.

        Args:
            config: Client configuration (defaults if omitted).
            cache: Result cache. A private TTLCache is created if omitted.
            sleep: Coroutine used for backoff and request spacing,
                injectable for tests.
            transport: httpx transport, injectable for tests.
        """
        self.config = config or RedditClientConfig()
        self.cache = cache if cache is not None else TTLCache(
            CacheConfig(
                ttl=self.config.cache_ttl,
                max_entries=self.config.cache_max_entries,
            )
        )
        self.content_filter = ContentFilter(min_length=self.config.min_comment_length)
        self.fetcher = Fetcher(
            FetcherConfig(
                timeout=self.config.timeout,
                retry=RetryPolicy(
                    max_retries=self.config.max_retries,
                    retry_delay=self.config.retry_delay,
                    backoff=self.config.backoff,
                ),
                user_agent=self.config.user_agent,
                accept="application/atom+xml, application/rss+xml, application/xml, text/xml",
            ),
            source_name="Reddit",
            error_cls=RedditApiError,
            sleep=sleep,
            transport=transport,
        )
        self._sleep = sleep or asyncio.sleep

    async def search_posts(
        self,
        query: str,
        limit: int = 25,
        subreddit: str | None = None,
        sort: str = "relevance",
        time: str = "year",
    ) -> RedditSearchResult:
        """
        Search posts about a product.

        Args:
            query: Product name or search text.
            limit: Maximum number of posts.
            subreddit: Restrict the search to one subreddit ("r/" optional).
            sort: relevance, hot, top, new or comments.
            time: hour, day, week, month, year or all.

        Returns:
            RedditSearchResult with posts in feed order.

        Raises:
            ValueError: Blank query, bad limit, unknown sort or time.
            RedditApiError: Request failed or the feed was malformed.
        """
        search_query = SearchQuery.parse(query, limit)
        if sort not in VALID_SORTS:
            raise ValueError(f"Unknown sort '{sort}', expected one of {list(VALID_SORTS)}")
        if time not in VALID_TIMES:
            raise ValueError(f"Unknown time '{time}', expected one of {list(VALID_TIMES)}")

        subreddit_name = _strip_subreddit(subreddit) or None
        key = search_query.cache_key(
            "reddit:search", (subreddit_name or "").lower(), sort, time
        )
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit: {key}")
            return cached

        params: dict[str, Any] = {
            "q": search_query.text,
            "limit": limit,
            "sort": sort,
            "t": time,
        }
        if subreddit_name:
            url = f"{self.config.base_url}/r/{subreddit_name}/search.rss"
            params["restrict_sr"] = 1
        else:
            url = f"{self.config.base_url}/search.rss"

        result = await self.fetcher.fetch(url, params=params)
        entries = parse_feed(result.content)

        posts: list[RedditPost] = []
        for entry in entries:
            post = self._parse_post(entry, subreddit_name)
            if post is not None:
                posts.append(post)

        search_result = RedditSearchResult(query=search_query.text, posts=posts)
        self.cache.set(key, search_result)

        logger.info(f"Reddit search '{search_query.text}': {len(posts)} posts")
        return search_result

    async def fetch_comments(self, permalink: str, limit: int = 50) -> list[RedditComment]:
        """
        Fetch the comments of a post.

        The first feed entry is the post itself and is never returned.
        Deleted/removed comments and comments shorter than
        min_comment_length are dropped.

        Args:
            permalink: Post permalink, absolute URL or path.
            limit: Maximum number of feed entries requested.

        Returns:
            List of comments in feed order.

        Raises:
            ValueError: Empty permalink.
            RedditApiError: Request failed or the feed was malformed.
        """
        path = thread_path(permalink)

        key = cache_key("reddit:comments", path, limit)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit: {key}")
            return cached

        result = await self.fetcher.fetch(
            f"{self.config.base_url}{path}.rss",
            params={"limit": limit},
        )
        entries = parse_feed(result.content)
        post_id = extract_post_id(path)

        comments: list[RedditComment] = []
        for entry in entries[1:]:
            comment = self._parse_comment(entry, post_id)
            if comment is not None:
                comments.append(comment)

        self.cache.set(key, comments)

        logger.info(
            f"Reddit thread {post_id}: {len(comments)} comments kept "
            f"of {max(len(entries) - 1, 0)} entries"
        )
        return comments

    async def search_with_comments(
        self,
        query: str,
        post_limit: int = 10,
        comments_per_post: int = 30,
        subreddit: str | None = None,
    ) -> RedditSearchWithComments:
        """
        Search posts, then attach each post's comments.

        Threads are fetched one at a time with request_delay between
        them. A post whose comment fetch fails keeps an empty comment
        list; the search itself failing raises.

        Args:
            query: Product name or search text.
            post_limit: Maximum number of posts.
            comments_per_post: Maximum feed entries requested per thread.
            subreddit: Restrict the search to one subreddit.

        Returns:
            RedditSearchWithComments in feed order.
        """
        search_result = await self.search_posts(query, limit=post_limit, subreddit=subreddit)

        posts_with_comments: list[RedditPostWithComments] = []
        for index, post in enumerate(search_result.posts):
            if index > 0 and self.config.request_delay > 0:
                await self._sleep(self.config.request_delay)

            try:
                comments = await self.fetch_comments(post.permalink, limit=comments_per_post)
            except RedditApiError as e:
                logger.warning(f"Failed to fetch comments for post {post.id}: {e}")
                comments = []

            posts_with_comments.append(RedditPostWithComments(post=post, comments=comments))

        return RedditSearchWithComments(
            query=search_result.query,
            posts=search_result.posts,
            posts_with_comments=posts_with_comments,
        )

    async def search(self, query: str, limit: int | None = None) -> RedditSearchResult:
        """Search posts (BaseSourceClient interface)."""
        return await self.search_posts(query, limit=limit or 25)

    async def fetch_children(
        self, parent: str, limit: int | None = None
    ) -> list[RedditComment]:
        """Fetch a post's comments by permalink (BaseSourceClient interface)."""
        return await self.fetch_comments(parent, limit=limit or 50)

    async def search_with_children(
        self, query: str, **options: Any
    ) -> RedditSearchWithComments:
        """Search with comments (BaseSourceClient interface)."""
        return await self.search_with_comments(query, **options)

    def clear_cache(self) -> None:
        """Drop every cached search and comment result."""
        self.cache.clear()

    def _parse_post(self, entry: FeedEntry, default_subreddit: str | None) -> RedditPost | None:
        """Map a search feed entry. Returns None if it has no title or link."""
        if not entry.title or not entry.link:
            logger.debug(f"Skipping feed entry without title/link: {entry.id}")
            return None

        title = normalize_text(entry.title)
        if not title:
            logger.debug(f"Skipping feed entry with empty title: {entry.id}")
            return None

        content = normalize_text(entry.content)
        if self.content_filter.is_deleted(content):
            content = ""

        post_id = extract_post_id(entry.link)
        if post_id == entry.link and entry.id:
            post_id = entry.id.removeprefix("t3_")

        return RedditPost(
            id=post_id,
            title=title,
            content=content,
            author=_strip_author(entry.author),
            subreddit=_strip_subreddit(entry.category) or default_subreddit or "",
            created_at=parse_timestamp(entry.updated),
            permalink=entry.link,
        )

    def _parse_comment(self, entry: FeedEntry, post_id: str) -> RedditComment | None:
        """Map a comment feed entry. Returns None if it fails the quality filter."""
        if not entry.content or not entry.link:
            return None

        content = normalize_text(entry.content)
        if not self.content_filter.passes(content):
            logger.debug(f"Dropped Reddit comment {entry.id}: {content[:30]!r}")
            return None

        if entry.id:
            comment_id = entry.id.removeprefix("t1_")
        else:
            comment_id = entry.link.rstrip("/").rsplit("/", 1)[-1]

        return RedditComment(
            id=comment_id,
            content=content,
            author=_strip_author(entry.author),
            created_at=parse_timestamp(entry.updated),
            permalink=entry.link,
            post_id=post_id,
        )


def create_reddit_client(
    config: RedditClientConfig | None = None,
    **kwargs: Any,
) -> RedditClient:
    """
    Create a new Reddit client.

    Loads configuration from config files and environment when no
    config is given. Every call returns an independent instance with
    its own cache.
    """
    return RedditClient(config or RedditClientConfig.from_config(), **kwargs)
