"""
Retry policy for source requests.

Classifies HTTP outcomes and computes the backoff between attempts.
The retry loop itself lives in Fetcher.fetch.
"""

from dataclasses import dataclass
from enum import StrEnum

from pulsecheck.core.primitives.exceptions import ErrorKind


class Backoff(StrEnum):
    """Delay strategy between attempts."""
    FIXED = "fixed"
    EXPONENTIAL = "exponential"


def classify_status(status_code: int) -> ErrorKind | None:
    """
    Classify an HTTP status code.

    Returns:
        None for a successful response, otherwise the failure class.
    """
    if status_code < 400:
        return None
    if status_code == 429:
        return ErrorKind.RATE_LIMITED
    if status_code >= 500:
        return ErrorKind.SERVER
    return ErrorKind.CLIENT


@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounded retry with deterministic backoff.

    max_retries counts re-attempts, so a request is tried at most
    max_retries + 1 times. Non-retryable outcomes are never re-attempted.
    """
    max_retries: int = 2
    retry_delay: float = 1.0
    backoff: Backoff = Backoff.EXPONENTIAL
    max_delay: float = 30.0

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.retry_delay < 0:
            raise ValueError(f"retry_delay must be >= 0, got {self.retry_delay}")

    @property
    def max_attempts(self) -> int:
        """Total number of attempts, including the first one."""
        return self.max_retries + 1

    def should_retry(self, kind: ErrorKind, attempt: int) -> bool:
        """
        Decide whether a failed attempt gets another try.

        Args:
            kind: Failure class of the attempt.
            attempt: Zero-based index of the attempt that just failed.
        """
        return kind.retryable and attempt < self.max_retries

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after the given zero-based failed attempt."""
        if self.backoff == Backoff.FIXED:
            delay = self.retry_delay
        else:
            delay = self.retry_delay * (2 ** attempt)
        return min(delay, self.max_delay)
