"""External API providers.

This package provides:
- Base provider with shared HTTP client handling (BaseProvider)
- Mentionlytics social-listening client (MentionlyticsClient)
- Backoff arithmetic (backoff, RetryPolicy)
"""

from warroom.app.providers.base import BaseProvider
from warroom.app.providers.mentionlytics import (
    MentionlyticsClient,
    get_mentionlytics_client,
    reset_mentionlytics_client,
)
from warroom.app.providers.retry import RetryPolicy, backoff, parse_retry_after

__all__ = [
    "BaseProvider",
    "MentionlyticsClient",
    "get_mentionlytics_client",
    "reset_mentionlytics_client",
    "RetryPolicy",
    "backoff",
    "parse_retry_after",
]
