"""Mentionlytics API client.

Every request passes through the outbound rate limiter, then the response
cache, then a bounded-timeout HTTP call that is retried with exponential
backoff on transient failures. Upstream 429 responses honor ``Retry-After``.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional

import httpx

from warroom.app.core.cache import ResponseCache, get_cache
from warroom.app.core.config import settings
from warroom.app.core.logging import get_log_context, get_logger
from warroom.app.exceptions import (
    ErrorCategory,
    InvalidUpstreamResponseError,
    RetriesExhaustedError,
    TransientNetworkError,
    UpstreamError,
    UpstreamHTTPError,
    UpstreamTimeoutError,
)
from warroom.app.middleware.rate_limit import RateLimiter, get_outbound_limiter
from warroom.app.providers.base import BaseProvider
from warroom.app.providers.retry import RetryPolicy, parse_retry_after

logger = get_logger(__name__)

UPSTREAM_CACHE_PREFIX = "upstream:"
OUTBOUND_IDENTIFIER = "global"

Sleep = Callable[[float], Awaitable[None]]


class MentionlyticsClient(BaseProvider):
    """Resilient client for the Mentionlytics REST API.

    Raw payloads are cached under ``"upstream:" + endpoint`` so they never
    collide with the normalized responses the listening service caches.
    """

    def __init__(
        self,
        api_token: str,
        base_url: str,
        http_client: Optional[httpx.AsyncClient] = None,
        limiter: Optional[RateLimiter] = None,
        cache: Optional[ResponseCache] = None,
        timeout: float = 30.0,
        retries: int = 3,
        retry_delay: float = 1.0,
        sleep: Optional[Sleep] = None,
    ):
        """Initialize the client.

        Args:
            api_token: Bearer credential; an empty token means "not configured"
            base_url: API root, e.g. ``https://api.mentionlytics.com/v1``
            http_client: Optional HTTP client (tests pass one with a MockTransport)
            limiter: Outbound limiter (process-wide one if omitted)
            cache: Response cache (process-wide one if omitted)
            timeout: Default per-attempt deadline in seconds
            retries: Default total number of attempts
            retry_delay: Default backoff base in seconds
            sleep: Awaitable used between attempts
        """
        super().__init__(base_url, api_token, http_client, timeout)
        self.limiter = limiter if limiter is not None else get_outbound_limiter()
        self.cache = cache if cache is not None else get_cache()
        self.retries = retries
        self.retry_delay = retry_delay
        self._sleep: Sleep = sleep or asyncio.sleep

    async def make_request(
        self,
        endpoint: str,
        params: Optional[Mapping[str, Any]] = None,
        *,
        timeout: Optional[float] = None,
        retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
        use_cache: bool = True,
        cache_ttl: Optional[float] = None,
    ) -> Any:
        """GET ``endpoint`` and return the decoded JSON body.

        Args:
            endpoint: Path relative to the base URL, e.g. ``"mentions"``
            params: Query parameters; None values are dropped
            timeout: Per-attempt deadline override
            retries: Total attempts override
            retry_delay: Backoff base override
            use_cache: Look up and store the raw payload in the cache
            cache_ttl: TTL for the stored payload (cache default if omitted)

        Raises:
            RateLimitExceeded: The outbound budget is spent. Raised before
                any network activity and never retried.
            UpstreamHTTPError: Non-2xx response, or 429 on the last attempt.
            RetriesExhaustedError: Every attempt failed with a timeout or a
                transient network error.
            UpstreamError: Any other request failure.
        """
        self.limiter.check(OUTBOUND_IDENTIFIER)

        query = {key: value for key, value in (params or {}).items() if value is not None}

        cache_key = None
        if use_cache:
            cache_key = self.cache.generate_key(UPSTREAM_CACHE_PREFIX + endpoint, query)
            cached = self.cache.get(cache_key)
            if cached is not None:
                logger.debug(
                    f"Serving '{endpoint}' from cache",
                    extra=get_log_context(endpoint=endpoint),
                )
                return cached

        policy = RetryPolicy(
            attempts=self.retries if retries is None else retries,
            retry_delay=self.retry_delay if retry_delay is None else retry_delay,
        )
        deadline = self.timeout if timeout is None else timeout
        url = self._get_endpoint_url(endpoint)

        attempt = 1
        while True:
            logger.info(
                f"Requesting Mentionlytics '{endpoint}'",
                extra=get_log_context(endpoint=endpoint, attempt=attempt, params=query),
            )
            try:
                data = await self._send(url, endpoint, query, deadline)
            except UpstreamError as exc:
                logger.error(
                    f"Mentionlytics request failed: {exc.message}",
                    extra=get_log_context(
                        endpoint=endpoint, attempt=attempt, category=exc.category.value
                    ),
                )
                if not policy.has_attempts_left(attempt):
                    if exc.retryable:
                        raise RetriesExhaustedError(exc, attempt) from exc
                    raise

                if exc.category is ErrorCategory.RATE_LIMITED:
                    delay = policy.calculate_delay(attempt, getattr(exc, "retry_after", None))
                    logger.warning(
                        f"Mentionlytics rate limited '{endpoint}', retrying in {delay}s",
                        extra=get_log_context(endpoint=endpoint, attempt=attempt),
                    )
                elif exc.retryable:
                    delay = policy.calculate_delay(attempt)
                else:
                    raise

                await self._sleep(delay)
                attempt += 1
                continue

            logger.info(
                f"Mentionlytics '{endpoint}' succeeded",
                extra=get_log_context(endpoint=endpoint, attempt=attempt),
            )
            if cache_key is not None:
                self.cache.set(cache_key, data, ttl=cache_ttl)
            return data

    async def _send(
        self,
        url: str,
        endpoint: str,
        query: Dict[str, Any],
        timeout: float,
    ) -> Any:
        """Perform one attempt and translate every failure into an UpstreamError."""
        async with self._client_context() as client:
            try:
                # wait_for cancels the in-flight request once the deadline passes
                response = await asyncio.wait_for(
                    client.get(url, params=query, headers=self.headers, timeout=timeout),
                    timeout=timeout,
                )
            except (asyncio.TimeoutError, httpx.TimeoutException) as e:
                raise UpstreamTimeoutError(endpoint, timeout) from e
            except (httpx.NetworkError, httpx.RemoteProtocolError, httpx.ProxyError) as e:
                raise TransientNetworkError(
                    f"Network error calling '{endpoint}': {e}", endpoint=endpoint
                ) from e
            except httpx.HTTPError as e:
                raise UpstreamError(
                    f"Request to '{endpoint}' failed: {e}", endpoint=endpoint
                ) from e

        if response.status_code == 429:
            raise UpstreamHTTPError(
                429,
                response.reason_phrase,
                endpoint=endpoint,
                retry_after=parse_retry_after(response.headers.get("Retry-After")),
            )
        if not response.is_success:
            raise UpstreamHTTPError(
                response.status_code, response.reason_phrase, endpoint=endpoint
            )

        try:
            return response.json()
        except ValueError as e:
            raise InvalidUpstreamResponseError(
                f"Invalid JSON from '{endpoint}'", endpoint=endpoint
            ) from e


# Global client instance (singleton pattern)
_client_instance: MentionlyticsClient | None = None


def get_mentionlytics_client() -> MentionlyticsClient:
    """Get or create the process-wide Mentionlytics client."""
    global _client_instance
    if _client_instance is None:
        _client_instance = MentionlyticsClient(
            api_token=settings.mentionlytics_api_token,
            base_url=settings.mentionlytics_base_url,
            timeout=settings.mentionlytics_timeout,
            retries=settings.mentionlytics_retries,
            retry_delay=settings.mentionlytics_retry_delay,
        )
    return _client_instance


def reset_mentionlytics_client() -> None:
    """Reset the global client instance. Primarily useful for testing."""
    global _client_instance
    _client_instance = None
