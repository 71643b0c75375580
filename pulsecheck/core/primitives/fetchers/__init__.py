"""
Source clients for discussion content.

This module provides clients for different discussion sources:
- HackerNewsClient: Stories and comments from the Algolia HN Search API
- RedditClient: Posts and comments from Reddit's public feeds
"""

from pulsecheck.core.primitives.fetchers.base import (
    BaseSourceClient,
    Quote,
    SearchQuery,
    SourceName,
)
from pulsecheck.core.primitives.fetchers.hackernews import (
    HackerNewsClient,
    HackerNewsClientConfig,
    HNComment,
    HNSearchResult,
    HNSearchWithComments,
    HNStory,
    HNStoryWithComments,
    create_hackernews_client,
)
from pulsecheck.core.primitives.fetchers.reddit import (
    RedditClient,
    RedditClientConfig,
    RedditComment,
    RedditPost,
    RedditPostWithComments,
    RedditSearchResult,
    RedditSearchWithComments,
    create_reddit_client,
)

__all__ = [
    "BaseSourceClient",
    "HackerNewsClient",
    "HackerNewsClientConfig",
    "HNComment",
    "HNSearchResult",
    "HNSearchWithComments",
    "HNStory",
    "HNStoryWithComments",
    "Quote",
    "RedditClient",
    "RedditClientConfig",
    "RedditComment",
    "RedditPost",
    "RedditPostWithComments",
    "RedditSearchResult",
    "RedditSearchWithComments",
    "SearchQuery",
    "SourceName",
    "create_hackernews_client",
    "create_reddit_client",
]
