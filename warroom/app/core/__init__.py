"""Core utilities for the war room application."""

from warroom.app.core.cache import ResponseCache, generate_key, get_cache, reset_cache
from warroom.app.core.config import settings
from warroom.app.core.logging import get_log_context, get_logger, setup_logging
from warroom.app.core.periodic import PeriodicTask

__all__ = [
    "ResponseCache",
    "generate_key",
    "get_cache",
    "reset_cache",
    "settings",
    "get_log_context",
    "get_logger",
    "setup_logging",
    "PeriodicTask",
]
