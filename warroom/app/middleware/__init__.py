"""Middleware package for the war room application."""

from warroom.app.middleware.rate_limit import (
    RateLimiter,
    RateLimitMiddleware,
    RateLimitPolicy,
    get_api_limiter,
    get_outbound_limiter,
    login_limiter,
)
from warroom.app.middleware.request_id import RequestIdMiddleware, get_request_id

__all__ = [
    "RateLimiter",
    "RateLimitMiddleware",
    "RateLimitPolicy",
    "get_api_limiter",
    "get_outbound_limiter",
    "login_limiter",
    "RequestIdMiddleware",
    "get_request_id",
]
