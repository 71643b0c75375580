"""
Base source client interface and common data structures.

All source clients inherit from BaseSourceClient and hand their records
to the report generator as Quote objects.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any


class SourceName(StrEnum):
    """Sources the report generator knows how to attribute."""
    REDDIT = "reddit"
    HACKERNEWS = "hackernews"
    STACKOVERFLOW = "stackoverflow"
    DEVTO = "devto"
    G2 = "g2"


@dataclass(frozen=True)
class Quote:
    """
    A quote-like record handed to the report generator.

    This is the common format every source record maps onto,
    regardless of source type (story, post, comment).
    """

    text: str
    source: SourceName
    author: str
    date: datetime | None
    url: str

    def __repr__(self) -> str:
        """Return string representation of quote."""
        preview = self.text[:50] + "..." if len(self.text) > 50 else self.text
        return f"<Quote(source='{self.source}', text='{preview}')>"


@dataclass(frozen=True)
class SearchQuery:
    """A trimmed product name plus an optional result limit."""

    text: str
    limit: int | None = None

    @classmethod
    def parse(cls, text: str, limit: int | None = None) -> "SearchQuery":
        """
        Build a query from user input.

        Raises:
            ValueError: If the query is blank or the limit is not positive.
        """
        trimmed = (text or "").strip()
        if not trimmed:
            raise ValueError("Search query must not be empty")
        if limit is not None and limit < 1:
            raise ValueError(f"limit must be >= 1, got {limit}")
        return cls(text=trimmed, limit=limit)

    def cache_key(self, prefix: str, *parts: Any) -> str:
        """Canonical cache key: lower-cased query plus result-shaping parameters."""
        return cache_key(prefix, self.text.lower(), self.limit, *parts)


def cache_key(prefix: str, *parts: Any) -> str:
    """Join key parts with ':' (None becomes an empty segment)."""
    return ":".join([prefix, *("" if part is None else str(part) for part in parts)])


class BaseSourceClient(ABC):
    """
    Abstract base class for source clients.

    Each client searches one source for top-level items (stories, posts)
    and fetches the child comments of an item. Implementations own their
    cache and retry configuration; nothing is shared between clients.
    """

    source: SourceName

    @abstractmethod
    async def search(self, query: str, limit: int | None = None) -> Any:
        """
        Search the source for top-level items about a product.

        Args:
            query: Product name or search text.
            limit: Maximum number of items.

        Returns:
            Source-specific search result with a `query` attribute.
        """
        pass

    @abstractmethod
    async def fetch_children(self, parent: Any, limit: int | None = None) -> list[Any]:
        """
        Fetch the comments of one top-level item.

        Args:
            parent: Source-specific item key (story id, permalink).
            limit: Maximum number of comments requested.
        """
        pass

    @abstractmethod
    async def search_with_children(self, query: str, **options: Any) -> Any:
        """Search, then attach comments to every returned item in search order."""
        pass

    @abstractmethod
    def clear_cache(self) -> None:
        """Drop every cached result."""
        pass
