"""
Primitives: atomic building blocks for source ingestion.

Each primitive does ONE thing well.
Source clients compose primitives into fetch pipelines.
"""

from pulsecheck.core.primitives.exceptions import (
    ErrorKind,
    HackerNewsApiError,
    RedditApiError,
    SourceApiError,
)
from pulsecheck.core.primitives.fetcher import (
    Fetcher,
    FetcherConfig,
    FetchResult,
)
from pulsecheck.core.primitives.normalizer import ContentFilter, normalize_text
from pulsecheck.core.primitives.retry import Backoff, RetryPolicy, classify_status

__all__ = [
    "Backoff",
    "ContentFilter",
    "ErrorKind",
    "Fetcher",
    "FetcherConfig",
    "FetchResult",
    "HackerNewsApiError",
    "RedditApiError",
    "RetryPolicy",
    "SourceApiError",
    "classify_status",
    "normalize_text",
]
