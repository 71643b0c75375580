"""Tests for retry classification and backoff."""

import pytest

from pulsecheck.core.primitives.exceptions import ErrorKind
from pulsecheck.core.primitives.retry import Backoff, RetryPolicy, classify_status


class TestClassifyStatus:
    """Tests for HTTP status classification."""

    @pytest.mark.parametrize("status", [200, 201, 204, 301, 304])
    def test_success_statuses(self, status):
        """Statuses below 400 are not failures."""
        assert classify_status(status) is None

    def test_rate_limited(self):
        """429 is rate limiting and retryable."""
        assert classify_status(429) is ErrorKind.RATE_LIMITED
        assert ErrorKind.RATE_LIMITED.retryable

    @pytest.mark.parametrize("status", [500, 502, 503, 504])
    def test_server_errors(self, status):
        """5xx are server errors and retryable."""
        assert classify_status(status) is ErrorKind.SERVER
        assert ErrorKind.SERVER.retryable

    @pytest.mark.parametrize("status", [400, 401, 403, 404, 410])
    def test_client_errors_are_fatal(self, status):
        """Other 4xx are client errors and never retried."""
        assert classify_status(status) is ErrorKind.CLIENT
        assert not ErrorKind.CLIENT.retryable

    def test_network_and_parse_kinds(self):
        """Transport failures retry, parse failures do not."""
        assert ErrorKind.NETWORK.retryable
        assert not ErrorKind.PARSE.retryable


class TestRetryPolicy:
    """Tests for RetryPolicy."""

    def test_defaults(self):
        """Default policy allows two retries with exponential backoff."""
        policy = RetryPolicy()

        assert policy.max_retries == 2
        assert policy.max_attempts == 3
        assert policy.backoff == Backoff.EXPONENTIAL

    def test_exponential_delays(self):
        """Exponential delays double per attempt."""
        policy = RetryPolicy(retry_delay=0.5)

        assert [policy.delay_for(a) for a in range(4)] == [0.5, 1.0, 2.0, 4.0]

    def test_exponential_delay_is_capped(self):
        """Delays never exceed max_delay."""
        policy = RetryPolicy(retry_delay=1.0, max_delay=3.0)

        assert policy.delay_for(5) == 3.0

    def test_fixed_delays(self):
        """Fixed backoff always waits retry_delay."""
        policy = RetryPolicy(retry_delay=2.0, backoff=Backoff.FIXED)

        assert [policy.delay_for(a) for a in range(3)] == [2.0, 2.0, 2.0]

    def test_backoff_accepts_plain_string(self):
        """Backoff loaded from config as a string behaves like the enum."""
        policy = RetryPolicy(retry_delay=2.0, backoff=Backoff("fixed"))

        assert policy.delay_for(3) == 2.0

    def test_should_retry_bounded_by_max_retries(self):
        """Retryable failures retry until max_retries re-attempts were made."""
        policy = RetryPolicy(max_retries=2)

        assert policy.should_retry(ErrorKind.SERVER, 0)
        assert policy.should_retry(ErrorKind.SERVER, 1)
        assert not policy.should_retry(ErrorKind.SERVER, 2)

    def test_should_not_retry_fatal(self):
        """Fatal failures are never retried."""
        policy = RetryPolicy(max_retries=5)

        assert not policy.should_retry(ErrorKind.CLIENT, 0)
        assert not policy.should_retry(ErrorKind.PARSE, 0)

    def test_zero_retries(self):
        """max_retries=0 means exactly one attempt."""
        policy = RetryPolicy(max_retries=0)

        assert policy.max_attempts == 1
        assert not policy.should_retry(ErrorKind.RATE_LIMITED, 0)

    def test_negative_values_rejected(self):
        """Negative retries or delays are configuration errors."""
        with pytest.raises(ValueError):
            RetryPolicy(max_retries=-1)
        with pytest.raises(ValueError):
            RetryPolicy(retry_delay=-0.1)
