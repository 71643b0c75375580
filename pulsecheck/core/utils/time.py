"""Time utilities for consistent timezone handling."""

import logging
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime

logger = logging.getLogger(__name__)


def parse_timestamp(value: str | None) -> datetime | None:
    """
    Parse an ISO-8601 timestamp from a source payload.

    Handles the variants the sources emit: "2024-01-15T10:00:00.000Z"
    (Algolia), "2024-01-15T10:00:00+00:00" (Reddit Atom) and RFC 2822
    dates from RSS pubDate. Naive timestamps are assumed to be UTC.

    Args:
        value: Raw timestamp string, possibly empty or None.

    Returns:
        Timezone-aware datetime, or None if the value is missing or
        cannot be parsed.

    Example:
        >>> parse_timestamp("2024-01-15T10:00:00.000Z").tzinfo == UTC
        True
        >>> parse_timestamp("yesterday") is None
        True
    """
    if not value:
        return None

    value = value.strip()
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        try:
            parsed = parsedate_to_datetime(value)
        except (TypeError, ValueError):
            logger.debug(f"Unparseable timestamp: {value!r}")
            return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed
