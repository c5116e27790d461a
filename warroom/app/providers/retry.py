"""Backoff arithmetic for provider retries.

Kept free of I/O so the delay schedule can be unit tested on its own.
"""

from dataclasses import dataclass
from email.utils import parsedate_to_datetime
from datetime import datetime, timezone
from typing import Optional


def backoff(attempt: int, base: float) -> float:
    """Delay before retrying after ``attempt`` failed.

    Attempts are 1-indexed: ``backoff(1, 1.0) == 1.0``, ``backoff(2, 1.0) == 2.0``,
    ``backoff(3, 1.0) == 4.0``.
    """
    if attempt < 1:
        raise ValueError("attempt numbers start at 1")
    return base * (2 ** (attempt - 1))


def parse_retry_after(value: Optional[str], now: Optional[datetime] = None) -> Optional[float]:
    """Seconds to wait according to a ``Retry-After`` header.

    Accepts both delta-seconds and HTTP-date forms. Returns None when the
    header is missing or unparseable.
    """
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None

    try:
        return max(0.0, float(value))
    except ValueError:
        pass

    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    return max(0.0, (when - now).total_seconds())


@dataclass
class RetryPolicy:
    """Attempt budget and backoff base for one request.

    Attributes:
        attempts: Total number of tries, including the first (default: 3)
        retry_delay: Backoff base in seconds (default: 1.0)

    Example:
        >>> policy = RetryPolicy(attempts=3, retry_delay=0.5)
        >>> policy.calculate_delay(2)
        1.0
    """

    attempts: int = 3
    retry_delay: float = 1.0

    def __post_init__(self) -> None:
        if self.attempts < 1:
            raise ValueError("attempts must be at least 1")
        if self.retry_delay < 0:
            raise ValueError("retry_delay must not be negative")

    def calculate_delay(self, attempt: int, retry_after: Optional[float] = None) -> float:
        """Delay after a failed ``attempt``; a server-provided value wins."""
        if retry_after is not None:
            return retry_after
        return backoff(attempt, self.retry_delay)

    def has_attempts_left(self, attempt: int) -> bool:
        return attempt < self.attempts
