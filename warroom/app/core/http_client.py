"""Shared HTTP client management for connection pooling.

A single ``httpx.AsyncClient`` is created in the application lifespan and
shared by every outbound provider call.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

import httpx

from warroom.app.core.config import settings


_shared_http_client: httpx.AsyncClient | None = None


def _default_limits() -> httpx.Limits:
    return httpx.Limits(
        max_connections=settings.httpx_max_connections,
        max_keepalive_connections=settings.httpx_max_keepalive_connections,
        keepalive_expiry=settings.httpx_keepalive_expiry,
    )


def _default_timeout() -> httpx.Timeout:
    # connect/write/pool are fixed here; the per-attempt deadline is applied
    # by the caller on top of the read timeout.
    return httpx.Timeout(
        connect=settings.httpx_connect_timeout,
        read=settings.httpx_read_timeout,
        write=settings.httpx_write_timeout,
        pool=settings.httpx_pool_timeout,
    )


def get_http_client() -> httpx.AsyncClient:
    """Get the shared HTTP client instance.

    Raises:
        RuntimeError: If the HTTP client has not been initialized.
    """
    if _shared_http_client is None:
        raise RuntimeError(
            "HTTP client not initialized. Ensure lifespan context is active."
        )
    return _shared_http_client


def peek_http_client() -> httpx.AsyncClient | None:
    """Return the shared client if the lifespan created one, else None."""
    return _shared_http_client


@asynccontextmanager
async def init_http_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    """Initialize and yield the shared HTTP client.

    This context manager should be used in the FastAPI lifespan:

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            async with init_http_client():
                yield
    """
    global _shared_http_client

    _shared_http_client = httpx.AsyncClient(
        timeout=_default_timeout(), limits=_default_limits()
    )

    try:
        yield _shared_http_client
    finally:
        if _shared_http_client is not None:
            await _shared_http_client.aclose()
            _shared_http_client = None


def create_http_client(**kwargs: Any) -> httpx.AsyncClient:
    """Create a new HTTP client with default settings.

    The returned client should be closed when done:
        async with create_http_client() as client:
            ...

    Args:
        **kwargs: ``timeout`` (single value overriding the granular defaults)
            and ``transport`` (e.g. ``httpx.MockTransport`` in tests).
    """
    timeout_override = kwargs.get("timeout")
    timeout = (
        httpx.Timeout(timeout_override)
        if timeout_override is not None
        else _default_timeout()
    )

    config: dict[str, Any] = {"timeout": timeout, "limits": _default_limits()}
    if kwargs.get("transport") is not None:
        config["transport"] = kwargs["transport"]
    return httpx.AsyncClient(**config)
