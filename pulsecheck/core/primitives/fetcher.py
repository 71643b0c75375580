"""
Fetcher primitive: downloads content from source APIs.

This is an atomic primitive that does ONE thing:
GET a URL under a retry policy and return the response in a structured
way, or raise a typed SourceApiError.
"""

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

import httpx

from pulsecheck.core.primitives.exceptions import ErrorKind, SourceApiError
from pulsecheck.core.primitives.retry import RetryPolicy, classify_status

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


@dataclass
class FetchResult:
    """Result of a successful fetch."""
    url: str
    status_code: int
    content: bytes
    attempts: int = 1

    def json(self) -> Any:
        """Decode the body as JSON. Raises ValueError on malformed payloads."""
        return json.loads(self.content)


@dataclass
class FetcherConfig:
    """Configuration for Fetcher."""
    timeout: float = 30.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    user_agent: str = "PulseCheck/1.0 (product sentiment research)"
    accept: str = "*/*"


class Fetcher:
    """
    Fetches content from source APIs with bounded retry.

    Transport failures, 429 and 5xx responses are retried with backoff up
    to the policy's limit. Any other status >= 400 fails after a single
    attempt.

    Usage:
        fetcher = Fetcher(FetcherConfig(accept="application/json"))
        result = await fetcher.fetch("https://hn.algolia.com/api/v1/search",
                                     params={"query": "notion"})
        data = result.json()
    """

    def __init__(
        self,
        config: FetcherConfig | None = None,
        *,
        source_name: str = "source",
        error_cls: type[SourceApiError] = SourceApiError,
        sleep: SleepFunc | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the fetcher.

        Args:
            config: Fetcher configuration.
            source_name: Label used in error messages and logs.
            error_cls: Exception type raised on failure.
            sleep: Coroutine awaited between attempts (asyncio.sleep by default).
            transport: Optional httpx transport, e.g. httpx.MockTransport in tests.
        """
        self.config = config or FetcherConfig()
        self.source_name = source_name
        self.error_cls = error_cls
        self._sleep = sleep or asyncio.sleep
        self._transport = transport

    async def fetch(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> FetchResult:
        """
        GET a URL, retrying transient failures.

        Args:
            url: Absolute URL.
            params: Query parameters.
            **kwargs: Per-call overrides: timeout, headers.

        Returns:
            FetchResult for the first non-failing response.

        Raises:
            SourceApiError (or the configured subclass): on a fatal status,
                or once retryable failures exhaust the policy.
        """
        timeout = kwargs.get("timeout", self.config.timeout)
        headers = {
            "User-Agent": self.config.user_agent,
            "Accept": self.config.accept,
            **kwargs.get("headers", {}),
        }
        policy = self.config.retry

        async with httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            transport=self._transport,
        ) as client:

            last_error: SourceApiError | None = None
            last_cause: Exception | None = None

            for attempt in range(policy.max_attempts):
                try:
                    response = await client.get(url, params=params, headers=headers)

                except httpx.TimeoutException as e:
                    last_error = self._error(
                        f"Timeout fetching from {self.source_name}", None, ErrorKind.NETWORK
                    )
                    last_cause = e
                    logger.warning(f"Timeout fetching {url}, attempt {attempt + 1}")

                except httpx.RequestError as e:
                    last_error = self._error(
                        f"Network error fetching from {self.source_name}: {e}",
                        None,
                        ErrorKind.NETWORK,
                    )
                    last_cause = e
                    logger.warning(f"Error fetching {url}: {e}, attempt {attempt + 1}")

                else:
                    last_cause = None
                    kind = classify_status(response.status_code)
                    if kind is None:
                        return FetchResult(
                            url=str(response.url),
                            status_code=response.status_code,
                            content=response.content,
                            attempts=attempt + 1,
                        )

                    last_error = self._status_error(response.status_code, kind)
                    if not kind.retryable:
                        logger.error(f"HTTP {response.status_code} from {url}, not retrying")
                        raise last_error

                    logger.warning(
                        f"HTTP {response.status_code} from {url}, attempt {attempt + 1}"
                    )

                if policy.should_retry(last_error.kind, attempt):
                    await self._sleep(policy.delay_for(attempt))

            raise last_error from last_cause

    def _status_error(self, status_code: int, kind: ErrorKind) -> SourceApiError:
        """Build the typed error for a failing HTTP status."""
        if kind is ErrorKind.RATE_LIMITED:
            message = f"Rate limited by {self.source_name}"
        else:
            message = f"{self.source_name} error: {status_code}"
        return self._error(message, status_code, kind)

    def _error(self, message: str, status_code: int | None, kind: ErrorKind) -> SourceApiError:
        return self.error_cls(
            message,
            status_code=status_code,
            retryable=kind.retryable,
            kind=kind,
        )

