"""
HackerNews client using the Algolia HN Search API.

The API is free and needs no authentication:
https://hn.algolia.com/api

This client:
1. Searches stories by relevance (or date)
2. Fetches the comments of a story
3. Normalizes comment HTML and drops low-quality comments
4. Caches every result for a bounded time
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import httpx

from pulsecheck.core.config.loader import get_sources_config, resolve_setting
from pulsecheck.core.primitives.exceptions import ErrorKind, HackerNewsApiError
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

HN_API_BASE = "https://hn.algolia.com/api/v1"
HN_ITEM_URL = "https://news.ycombinator.com/item?id={id}"

SORT_ENDPOINTS = {
    "relevance": "search",
    "date": "search_by_date",
}


@dataclass(frozen=True)
class HNStory:
    """A story hit from the search API."""

    id: int
    title: str
    url: str | None
    author: str
    points: int
    num_comments: int
    created_at: datetime | None
    story_text: str | None = None

    @property
    def item_url(self) -> str:
        """Discussion page on news.ycombinator.com."""
        return HN_ITEM_URL.format(id=self.id)

    def to_quote(self) -> Quote:
        """Map onto the report generator's quote shape."""
        text = self.title
        if self.story_text:
            text = f"{self.title}\n\n{self.story_text}"
        return Quote(
            text=text,
            source=SourceName.HACKERNEWS,
            author=self.author,
            date=self.created_at,
            url=self.url or self.item_url,
        )


@dataclass(frozen=True)
class HNComment:
    """A comment on a story. story_id refers back to the parent story."""

    id: int
    text: str
    author: str
    created_at: datetime | None
    story_id: int

    def to_quote(self) -> Quote:
        """Map onto the report generator's quote shape."""
        return Quote(
            text=self.text,
            source=SourceName.HACKERNEWS,
            author=self.author,
            date=self.created_at,
            url=HN_ITEM_URL.format(id=self.id),
        )


@dataclass(frozen=True)
class HNSearchResult:
    """Stories returned for a query, in source ranking order."""

    query: str
    stories: list[HNStory] = field(default_factory=list)


@dataclass(frozen=True)
class HNStoryWithComments:
    """A story with its filtered comments attached."""

    story: HNStory
    comments: list[HNComment] = field(default_factory=list)


@dataclass(frozen=True)
class HNSearchWithComments:
    """Result of search_with_comments. Both lists follow search order."""

    query: str
    stories: list[HNStory]
    stories_with_comments: list[HNStoryWithComments]


@dataclass
class HackerNewsClientConfig:
    """Configuration for HackerNewsClient. Durations are in seconds."""

    base_url: str = HN_API_BASE
    cache_ttl: float = 300.0
    cache_max_entries: int | None = 1024
    max_retries: int = 2
    retry_delay: float = 1.0
    backoff: Backoff = Backoff.EXPONENTIAL
    timeout: float = 30.0
    min_comment_length: int = DEFAULT_MIN_LENGTH
    concurrent_limit: int = 3

    @classmethod
    def from_config(cls) -> "HackerNewsClientConfig":
        """
        Load configuration from the sources.hackernews config section.

        Environment variables (HN_*) take precedence over config files.
        """
        section = get_sources_config("hackernews")
        return cls(
            base_url=resolve_setting(section, "base_url", "HN_BASE_URL", HN_API_BASE),
            cache_ttl=resolve_setting(section, "cache_ttl", "HN_CACHE_TTL", 300.0, float),
            cache_max_entries=resolve_setting(
                section, "cache_max_entries", "HN_CACHE_MAX_ENTRIES", 1024, int
            ),
            max_retries=resolve_setting(section, "max_retries", "HN_MAX_RETRIES", 2, int),
            retry_delay=resolve_setting(section, "retry_delay", "HN_RETRY_DELAY", 1.0, float),
            backoff=resolve_setting(
                section, "backoff", "HN_BACKOFF", Backoff.EXPONENTIAL, Backoff
            ),
            timeout=resolve_setting(section, "timeout", "HN_TIMEOUT", 30.0, float),
            min_comment_length=resolve_setting(
                section, "min_comment_length", "HN_MIN_COMMENT_LENGTH", DEFAULT_MIN_LENGTH, int
            ),
            concurrent_limit=resolve_setting(
                section, "concurrent_limit", "HN_CONCURRENT_LIMIT", 3, int
            ),
        )


def parse_object_id(value: Any) -> int | None:
    """
    Parse an Algolia objectID into a non-negative integer.

    Returns:
        The id, or None if the value is not a plain decimal number.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text or not (text.isascii() and text.isdigit()):
        return None
    return int(text)


def _as_int(value: Any) -> int:
    """Coerce an optional numeric field, treating missing or junk values as 0."""
    try:
        return max(int(value or 0), 0)
    except (TypeError, ValueError):
        return 0


class HackerNewsClient(BaseSourceClient):
    """
    Fetches stories and comments from the Algolia HN Search API.

    Usage:
        client = HackerNewsClient()
        result = await client.search_stories("Notion")

        for story in result.stories:
            comments = await client.fetch_comments(story.id)
    """

    source = SourceName.HACKERNEWS

    def __init__(
        self,
        config: HackerNewsClientConfig | None = None,
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
            sleep: Backoff coroutine, injectable for tests.
            transport: httpx transport, injectable for tests.
        """
        self.config = config or HackerNewsClientConfig()
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
                accept="application/json",
            ),
            source_name="HN Algolia API",
            error_cls=HackerNewsApiError,
            sleep=sleep,
            transport=transport,
        )

    async def search_stories(
        self,
        query: str,
        limit: int = 20,
        sort: str = "relevance",
    ) -> HNSearchResult:
        """
        Search stories about a product.

        Args:
            query: Product name or search text.
            limit: Maximum number of stories (hitsPerPage).
            sort: "relevance" (default) or "date".

        Returns:
            HNSearchResult with stories in source ranking order.

        Raises:
            ValueError: Blank query, bad limit or unknown sort.
            HackerNewsApiError: Request failed or payload was malformed.
        """
        search_query = SearchQuery.parse(query, limit)
        if sort not in SORT_ENDPOINTS:
            raise ValueError(f"Unknown sort '{sort}', expected one of {list(SORT_ENDPOINTS)}")

        key = search_query.cache_key("hn:stories", sort)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit: {key}")
            return cached

        hits = await self._search_hits(
            SORT_ENDPOINTS[sort],
            {"query": search_query.text, "tags": "story", "hitsPerPage": limit},
        )

        stories: list[HNStory] = []
        for hit in hits:
            story = self._parse_story(hit)
            if story is not None:
                stories.append(story)

        result = HNSearchResult(query=search_query.text, stories=stories)
        self.cache.set(key, result)

        logger.info(f"HN search '{search_query.text}': {len(stories)} stories")
        return result

    async def fetch_comments(self, story_id: int, limit: int = 30) -> list[HNComment]:
        """
        Fetch comments of a story.

        Comment HTML is normalized to plain text; comments shorter than
        min_comment_length (or deletion markers) are dropped.

        Args:
            story_id: Numeric story id.
            limit: Maximum number of comment hits requested.

        Returns:
            List of comments in source order.

        Raises:
            ValueError: Negative or non-integer story id.
            HackerNewsApiError: Request failed or payload was malformed.
        """
        if isinstance(story_id, bool) or not isinstance(story_id, int) or story_id < 0:
            raise ValueError(f"story_id must be a non-negative integer, got {story_id!r}")

        key = cache_key("hn:comments", story_id, limit)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit: {key}")
            return cached

        hits = await self._search_hits(
            "search",
            {"tags": f"comment,story_{story_id}", "hitsPerPage": limit},
        )

        comments: list[HNComment] = []
        for hit in hits:
            comment = self._parse_comment(hit, story_id)
            if comment is not None:
                comments.append(comment)

        self.cache.set(key, comments)

        logger.info(
            f"HN story {story_id}: {len(comments)} comments kept of {len(hits)} hits"
        )
        return comments

    async def search_with_comments(
        self,
        query: str,
        story_limit: int = 10,
        comments_per_story: int = 20,
    ) -> HNSearchWithComments:
        """
        Search stories, then attach each story's comments.

        Comment fetches run concurrently (at most concurrent_limit at a
        time). A story whose comment fetch fails keeps an empty comment
        list; the search itself failing raises.

        Args:
            query: Product name or search text.
            story_limit: Maximum number of stories.
            comments_per_story: Maximum comments requested per story.

        Returns:
            HNSearchWithComments in search order.
        """
        search_result = await self.search_stories(query, limit=story_limit)
        semaphore = asyncio.Semaphore(max(self.config.concurrent_limit, 1))

        async def comments_with_semaphore(story: HNStory) -> list[HNComment]:
            async with semaphore:
                try:
                    return await self.fetch_comments(story.id, limit=comments_per_story)
                except HackerNewsApiError as e:
                    logger.warning(f"Failed to fetch HN comments for story {story.id}: {e}")
                    return []

        tasks = [comments_with_semaphore(story) for story in search_result.stories]
        all_comments = await asyncio.gather(*tasks)

        stories_with_comments = [
            HNStoryWithComments(story=story, comments=comments)
            for story, comments in zip(search_result.stories, all_comments)
        ]
        return HNSearchWithComments(
            query=search_result.query,
            stories=search_result.stories,
            stories_with_comments=stories_with_comments,
        )

    async def search(self, query: str, limit: int | None = None) -> HNSearchResult:
        """Search stories (BaseSourceClient interface)."""
        return await self.search_stories(query, limit=limit or 20)

    async def fetch_children(self, parent: int, limit: int | None = None) -> list[HNComment]:
        """Fetch a story's comments (BaseSourceClient interface)."""
        return await self.fetch_comments(parent, limit=limit or 30)

    async def search_with_children(self, query: str, **options: Any) -> HNSearchWithComments:
        """Search with comments (BaseSourceClient interface)."""
        return await self.search_with_comments(query, **options)

    def clear_cache(self) -> None:
        """Drop every cached search and comment result."""
        self.cache.clear()

    async def _search_hits(self, endpoint: str, params: dict[str, Any]) -> list[dict]:
        """
        GET an Algolia search endpoint and return its hits.

        Raises:
            HackerNewsApiError: Request failed, or the body is not JSON
                with a "hits" list (kind=PARSE, never retried).
        """
        result = await self.fetcher.fetch(f"{self.config.base_url}/{endpoint}", params=params)

        try:
            data = result.json()
        except ValueError as e:
            raise HackerNewsApiError(
                "Malformed JSON from HN Algolia API",
                kind=ErrorKind.PARSE,
            ) from e

        hits = data.get("hits") if isinstance(data, dict) else None
        if not isinstance(hits, list):
            raise HackerNewsApiError(
                "HN Algolia API response has no 'hits' list",
                kind=ErrorKind.PARSE,
            )

        return [hit for hit in hits if isinstance(hit, dict)]

    def _parse_story(self, hit: dict) -> HNStory | None:
        """Map a story hit. Returns None if its objectID is unusable."""
        story_id = parse_object_id(hit.get("objectID"))
        if story_id is None:
            logger.warning(f"Skipping HN story with invalid objectID: {hit.get('objectID')!r}")
            return None

        return HNStory(
            id=story_id,
            title=hit.get("title") or "",
            url=hit.get("url") or None,
            author=hit.get("author") or "[unknown]",
            points=_as_int(hit.get("points")),
            num_comments=_as_int(hit.get("num_comments")),
            created_at=parse_timestamp(hit.get("created_at")),
            story_text=normalize_text(hit.get("story_text")) or None,
        )

    def _parse_comment(self, hit: dict, story_id: int) -> HNComment | None:
        """Map a comment hit. Returns None if it fails the quality filter."""
        comment_id = parse_object_id(hit.get("objectID"))
        if comment_id is None:
            logger.warning(f"Skipping HN comment with invalid objectID: {hit.get('objectID')!r}")
            return None

        text = normalize_text(hit.get("comment_text"))
        if not self.content_filter.passes(text):
            logger.debug(f"Dropped HN comment {comment_id}: {len(text)} chars")
            return None

        return HNComment(
            id=comment_id,
            text=text,
            author=hit.get("author") or "[unknown]",
            created_at=parse_timestamp(hit.get("created_at")),
            story_id=story_id,
        )


def create_hackernews_client(
    config: HackerNewsClientConfig | None = None,
    **kwargs: Any,
) -> HackerNewsClient:
    """
    Create a new HackerNews client.

    Loads configuration from config files and environment when no
    config is given. Every call returns an independent instance with
    its own cache.
    """
    return HackerNewsClient(config or HackerNewsClientConfig.from_config(), **kwargs)
