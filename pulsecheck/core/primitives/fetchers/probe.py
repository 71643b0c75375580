"""
CLI script to probe a source client against the live API.

Usage:
    python -m pulsecheck.core.primitives.fetchers.probe reddit <query>
    python -m pulsecheck.core.primitives.fetchers.probe hackernews <query> --comments

Examples:
    # Five Reddit posts about Notion
    python -m pulsecheck.core.primitives.fetchers.probe reddit Notion --limit 5

    # HackerNews stories with their comments
    python -m pulsecheck.core.primitives.fetchers.probe hackernews Obsidian --comments
"""

import argparse
import asyncio
import logging
import sys

from pulsecheck.core.primitives.exceptions import SourceApiError
from pulsecheck.core.primitives.fetchers.base import Quote
from pulsecheck.core.primitives.fetchers.hackernews import create_hackernews_client
from pulsecheck.core.primitives.fetchers.reddit import create_reddit_client

logger = logging.getLogger(__name__)


def setup_logging(log_level: str) -> None:
    """
    Configure logging for the probe.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def print_quote(index: int, quote: Quote, indent: str = "") -> None:
    """Print one record in its downstream quote shape."""
    preview = quote.text[:200].replace("\n", " ")
    print(f"{indent}{index}. {preview}")
    print(f"{indent}   by {quote.author} | {quote.date or 'no date'} | {quote.url}")


async def probe(source: str, query: str, limit: int, comments: bool) -> int:
    """
    Run one search against a source and print the results.

    Returns:
        Process exit code: 1 on API failure, 2 on invalid input.
    """
    print(f"Probing {source} for: {query}")
    print("-" * 60)

    try:
        if source == "reddit":
            client = create_reddit_client()
            if comments:
                result = await client.search_with_comments(query, post_limit=limit)
                pairs = [(p.post, p.comments) for p in result.posts_with_comments]
            else:
                result = await client.search_posts(query, limit=limit)
                pairs = [(post, []) for post in result.posts]
        else:
            client = create_hackernews_client()
            if comments:
                result = await client.search_with_comments(query, story_limit=limit)
                pairs = [(s.story, s.comments) for s in result.stories_with_comments]
            else:
                result = await client.search_stories(query, limit=limit)
                pairs = [(story, []) for story in result.stories]
    except SourceApiError as e:
        print(f"Error: {e} (status={e.status_code}, retryable={e.retryable})")
        return 1
    except ValueError as e:
        print(f"Invalid input: {e}")
        return 2

    print(f"\nFound {len(pairs)} items:\n")

    for i, (item, item_comments) in enumerate(pairs, 1):
        print_quote(i, item.to_quote())
        for j, comment in enumerate(item_comments[:5], 1):
            print_quote(j, comment.to_quote(), indent="      ")
        if len(item_comments) > 5:
            print(f"      ... and {len(item_comments) - 5} more comments")
        print()

    return 0


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Probe a discussion source")
    parser.add_argument("source", choices=["reddit", "hackernews"], help="Source to query")
    parser.add_argument("query", help="Product name to search for")
    parser.add_argument("--limit", type=int, default=5, help="Maximum items (default: 5)")
    parser.add_argument(
        "--comments",
        action="store_true",
        help="Also fetch comments for every item",
    )
    parser.add_argument("--log-level", default="WARNING", help="Logging level")

    args = parser.parse_args()
    setup_logging(args.log_level)

    sys.exit(asyncio.run(probe(args.source, args.query, args.limit, args.comments)))


if __name__ == "__main__":
    main()
