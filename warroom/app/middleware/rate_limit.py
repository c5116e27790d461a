"""Fixed-window rate limiting with escalating blocks.

One parameterized limiter serves three profiles: the process-wide budget for
outbound provider calls, the per-client inbound API throttle, and the
stricter login-style throttle. Records live in a mapping injected at
construction. State is per process, so a multi-instance deployment gives
each instance its own quota.
"""

import hashlib
import math
import time
from collections.abc import MutableMapping
from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from warroom.app.core.config import settings
from warroom.app.core.logging import get_logger
from warroom.app.exceptions import RateLimitExceeded

logger = get_logger(__name__)

BASE_BLOCK_SECONDS = 60.0
RECORD_RETENTION_SECONDS = 60 * 60  # Sweep records idle for more than an hour


@dataclass
class RateLimitRecord:
    """Rate limit state for one identifier."""

    count: int
    window_start: float
    blocked: bool = False
    block_expires: Optional[float] = None
    block_duration: float = BASE_BLOCK_SECONDS

    def last_activity(self) -> float:
        return self.block_expires if self.block_expires is not None else self.window_start


@dataclass(frozen=True)
class RateLimitPolicy:
    """Threshold and window for one limiter profile."""

    max_attempts: int
    window_seconds: float


GLOBAL_POLICY = RateLimitPolicy(max_attempts=100, window_seconds=60)


class RateLimiter:
    """Counts requests per identifier inside a fixed window.

    Once an identifier exceeds ``max_attempts`` within a window it is blocked
    for ``block_duration`` seconds (one minute on the first violation); the
    duration doubles on every further violation and returns to one minute
    when a fresh window starts.

    Example:
        >>> limiter = RateLimiter(RateLimitPolicy(max_attempts=5, window_seconds=60))
        >>> limiter.check("203.0.113.7")  # raises RateLimitExceeded when over budget
    """

    def __init__(
        self,
        policy: RateLimitPolicy = GLOBAL_POLICY,
        store: Optional[MutableMapping[str, RateLimitRecord]] = None,
        clock: Callable[[], float] = time.time,
        base_block_seconds: float = BASE_BLOCK_SECONDS,
        retention_seconds: float = RECORD_RETENTION_SECONDS,
    ):
        """Initialize the limiter.

        Args:
            policy: Default threshold and window used by ``check``
            store: Mapping holding the records (a fresh dict if omitted)
            clock: Returns the current time in seconds
            base_block_seconds: Block duration of a first violation
            retention_seconds: Idle time after which ``cleanup`` drops a record
        """
        self.policy = policy
        self._store: MutableMapping[str, RateLimitRecord] = store if store is not None else {}
        self._clock = clock
        self._base_block = base_block_seconds
        self._retention = retention_seconds

    def __len__(self) -> int:
        return len(self._store)

    def get_record(self, identifier: str) -> Optional[RateLimitRecord]:
        return self._store.get(identifier)

    def check(
        self,
        identifier: str = "global",
        max_attempts: Optional[int] = None,
        window_seconds: Optional[float] = None,
    ) -> None:
        """Count one request for ``identifier``.

        Raises:
            RateLimitExceeded: If the identifier is blocked or just went over
                its allowance. ``retry_after`` holds whole seconds to wait.
        """
        max_attempts = self.policy.max_attempts if max_attempts is None else max_attempts
        window = self.policy.window_seconds if window_seconds is None else window_seconds
        now = self._clock()
        record = self._store.get(identifier)

        if (
            record is not None
            and record.blocked
            and record.block_expires is not None
            and now < record.block_expires
        ):
            raise RateLimitExceeded(record.block_expires - now, identifier=identifier)

        if record is None or now > record.window_start + window:
            self._store[identifier] = RateLimitRecord(
                count=1,
                window_start=now,
                block_duration=self._base_block,
            )
            return

        record.count += 1
        if record.count > max_attempts:
            block_duration = record.block_duration or self._base_block
            record.blocked = True
            record.block_expires = now + block_duration
            record.block_duration = block_duration * 2

            logger.warning(
                f"Rate limit exceeded for {identifier}",
                extra={
                    "identifier": identifier,
                    "count": record.count,
                    "limit": max_attempts,
                    "block_seconds": block_duration,
                },
            )
            raise RateLimitExceeded(block_duration, identifier=identifier)

    def cleanup(self) -> int:
        """Drop records whose window and block ended over an hour ago.

        Returns:
            Number of records removed.
        """
        now = self._clock()
        stale = [
            key for key, record in self._store.items()
            if now > record.last_activity() + self._retention
        ]
        for key in stale:
            del self._store[key]

        if stale:
            logger.info(f"Cleaned up {len(stale)} old rate limit records")
        return len(stale)

    def reset(self) -> None:
        self._store.clear()


def client_identifier(request: Request) -> str:
    """Rate limit key for an inbound request, derived from the client IP.

    The IP is hashed so raw addresses are never held in memory.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        client_ip = forwarded.split(",")[0].strip()
    else:
        client_ip = request.client.host if request.client else "unknown"

    ip_hash = hashlib.sha256(client_ip.encode()).hexdigest()[:32]
    return f"ratelimit:ip:{ip_hash}"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Throttles inbound requests per client IP."""

    def __init__(
        self,
        app,
        limiter: Optional[RateLimiter] = None,
        exempt_paths: tuple[str, ...] = ("/health",),
    ):
        super().__init__(app)
        self.limiter = limiter or get_api_limiter()
        self.exempt_paths = exempt_paths

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.exempt_paths:
            return await call_next(request)

        try:
            self.limiter.check(client_identifier(request))
        except RateLimitExceeded as exc:
            return JSONResponse(
                status_code=exc.status_code,
                content={
                    "error": exc.error_code,
                    "message": exc.message,
                    "retry_after": exc.retry_after,
                },
                headers={"Retry-After": str(exc.retry_after)},
            )

        return await call_next(request)


# Process-wide limiter instances
_outbound_limiter: RateLimiter | None = None
_api_limiter: RateLimiter | None = None


def get_outbound_limiter() -> RateLimiter:
    """Limiter shared by all outbound provider calls (identifier ``"global"``)."""
    global _outbound_limiter
    if _outbound_limiter is None:
        _outbound_limiter = RateLimiter(
            RateLimitPolicy(
                max_attempts=settings.outbound_rate_limit,
                window_seconds=settings.rate_limit_window_seconds,
            )
        )
    return _outbound_limiter


def get_api_limiter() -> RateLimiter:
    """Limiter used by ``RateLimitMiddleware`` for inbound traffic."""
    global _api_limiter
    if _api_limiter is None:
        _api_limiter = RateLimiter(
            RateLimitPolicy(
                max_attempts=settings.api_rate_limit,
                window_seconds=settings.rate_limit_window_seconds,
            )
        )
    return _api_limiter


def login_limiter(
    store: Optional[MutableMapping[str, RateLimitRecord]] = None,
    clock: Callable[[], float] = time.time,
) -> RateLimiter:
    """A limiter with the credential-endpoint profile (5 attempts per window).

    Unlike the outbound and API limiters it is not registered with the
    application's periodic sweeps; whoever creates one must call
    ``cleanup`` on it (for example from a ``PeriodicTask``).
    """
    return RateLimiter(
        RateLimitPolicy(
            max_attempts=settings.login_rate_limit,
            window_seconds=settings.rate_limit_window_seconds,
        ),
        store=store,
        clock=clock,
    )


def reset_rate_limiters() -> None:
    """Forget the process-wide limiters. Primarily useful for testing."""
    global _outbound_limiter, _api_limiter
    _outbound_limiter = None
    _api_limiter = None
