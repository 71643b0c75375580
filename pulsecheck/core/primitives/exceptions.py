"""
Source API exceptions.

Every source client raises a subclass of SourceApiError, so callers can
decide per source whether to retry later, skip the source, or show a
rate-limit message.
"""

from enum import StrEnum


class ErrorKind(StrEnum):
    """Failure classes for a source request."""

    NETWORK = "network"
    RATE_LIMITED = "rate_limited"
    SERVER = "server"
    CLIENT = "client"
    PARSE = "parse"

    @property
    def retryable(self) -> bool:
        """True if a request failing this way may succeed on a later attempt."""
        return self in (ErrorKind.NETWORK, ErrorKind.RATE_LIMITED, ErrorKind.SERVER)


class SourceApiError(Exception):
    """
    Base exception for all source API errors.

    Attributes:
        message: Human-readable description.
        status_code: HTTP status of the last attempt, None for transport
            and parse failures.
        retryable: True if the failure was transient. When raised by a
            client the retries are already exhausted.
        kind: Failure class.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        retryable: bool = False,
        kind: ErrorKind = ErrorKind.CLIENT,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.retryable = retryable
        self.kind = kind

    @property
    def is_rate_limited(self) -> bool:
        """True if the source refused the request with HTTP 429."""
        return self.kind is ErrorKind.RATE_LIMITED

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self.message!r}, status_code={self.status_code}, "
            f"retryable={self.retryable}, kind={self.kind.value})"
        )


class HackerNewsApiError(SourceApiError):
    """HackerNews (Algolia) request failed."""

    pass


class RedditApiError(SourceApiError):
    """Reddit feed request failed."""

    pass
