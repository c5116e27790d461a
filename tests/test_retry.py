"""Tests for backoff arithmetic and Retry-After parsing."""

from datetime import datetime, timedelta, timezone
from email.utils import format_datetime

import pytest

from warroom.app.providers.retry import RetryPolicy, backoff, parse_retry_after


class TestBackoff:
    def test_doubles_per_attempt(self):
        assert [backoff(n, 1.0) for n in (1, 2, 3, 4)] == [1.0, 2.0, 4.0, 8.0]

    def test_scales_with_base(self):
        assert backoff(3, 0.5) == 2.0

    def test_zero_base(self):
        assert backoff(5, 0.0) == 0.0

    def test_attempts_start_at_one(self):
        with pytest.raises(ValueError):
            backoff(0, 1.0)


class TestParseRetryAfter:
    def test_seconds(self):
        assert parse_retry_after("2") == 2.0

    def test_fractional_seconds(self):
        assert parse_retry_after(" 1.5 ") == 1.5

    def test_negative_is_clamped(self):
        assert parse_retry_after("-3") == 0.0

    def test_missing(self):
        assert parse_retry_after(None) is None
        assert parse_retry_after("") is None

    def test_garbage(self):
        assert parse_retry_after("soon") is None

    def test_http_date(self):
        now = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        header = format_datetime(now + timedelta(seconds=30), usegmt=True)
        assert parse_retry_after(header, now=now) == 30.0

    def test_http_date_in_the_past(self):
        now = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        header = format_datetime(now - timedelta(minutes=5), usegmt=True)
        assert parse_retry_after(header, now=now) == 0.0


class TestRetryPolicy:
    """Test RetryPolicy configuration."""

    def test_default_values(self):
        policy = RetryPolicy()
        assert policy.attempts == 3
        assert policy.retry_delay == 1.0

    def test_calculate_delay(self):
        policy = RetryPolicy(retry_delay=0.5)
        assert policy.calculate_delay(1) == 0.5
        assert policy.calculate_delay(2) == 1.0

    def test_server_delay_wins(self):
        policy = RetryPolicy(retry_delay=1.0)
        assert policy.calculate_delay(3, retry_after=2.0) == 2.0

    def test_has_attempts_left(self):
        policy = RetryPolicy(attempts=3)
        assert policy.has_attempts_left(1)
        assert policy.has_attempts_left(2)
        assert not policy.has_attempts_left(3)

    def test_rejects_invalid_values(self):
        with pytest.raises(ValueError):
            RetryPolicy(attempts=0)
        with pytest.raises(ValueError):
            RetryPolicy(retry_delay=-1)
