"""Tests for the shared HTTP client lifecycle."""

import httpx
import pytest

from warroom.app.core.http_client import (
    create_http_client,
    get_http_client,
    init_http_client,
    peek_http_client,
)
from warroom.app.providers.base import BaseProvider


def test_get_before_init_raises():
    with pytest.raises(RuntimeError):
        get_http_client()
    assert peek_http_client() is None


@pytest.mark.asyncio
async def test_init_yields_shared_client_and_closes_it():
    async with init_http_client() as client:
        assert get_http_client() is client
        assert peek_http_client() is client

    assert client.is_closed
    assert peek_http_client() is None


@pytest.mark.asyncio
async def test_create_http_client_timeout_override():
    async with create_http_client(timeout=2.5) as client:
        assert client.timeout.read == 2.5
        assert client.timeout.connect == 2.5


@pytest.mark.asyncio
async def test_provider_uses_lifespan_client():
    provider = BaseProvider("https://api.test/v1/", "key")

    async with init_http_client() as shared:
        async with provider._client_context() as client:
            assert client is shared
        assert not shared.is_closed


@pytest.mark.asyncio
async def test_provider_closes_temporary_client():
    provider = BaseProvider("https://api.test/v1/", "key")

    async with provider._client_context() as client:
        assert isinstance(client, httpx.AsyncClient)
    assert client.is_closed


def test_endpoint_url():
    provider = BaseProvider("https://api.test/v1/", "key")
    assert provider._get_endpoint_url("/mentions") == "https://api.test/v1/mentions"
    assert provider.headers["Authorization"] == "Bearer key"
