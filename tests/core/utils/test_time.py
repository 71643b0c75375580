"""Tests for time utilities."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from pulsecheck.core.utils.time import parse_timestamp


@pytest.mark.parametrize(
    "value",
    [
        "2024-01-15T10:00:00.000Z",
        "2024-01-15T10:00:00Z",
        "2024-01-15T10:00:00+00:00",
        "2024-01-15T10:00:00",
        "Mon, 15 Jan 2024 10:00:00 GMT",
        "Mon, 15 Jan 2024 10:00:00 +0000",
    ],
)
def test_parse_timestamp_formats(value):
    """Algolia, Atom and RSS timestamps all parse to the same instant."""
    assert parse_timestamp(value) == datetime(2024, 1, 15, 10, 0, tzinfo=UTC)


def test_parse_timestamp_keeps_offset():
    parsed = parse_timestamp("2024-01-15T12:00:00+02:00")

    assert parsed.utcoffset() == timedelta(hours=2)
    assert parsed == datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("value", [None, "", "yesterday", "2024-13-45"])
def test_parse_timestamp_invalid(value):
    assert parse_timestamp(value) is None
