"""Tests for the social-listening proxy endpoints."""

import random

import httpx
import pytest
import pytest_asyncio

from warroom.app.core.cache import ResponseCache
from warroom.app.middleware.rate_limit import RateLimiter, RateLimitPolicy
from warroom.app.providers.mentionlytics import MentionlyticsClient
from warroom.app.services.listening import (
    MESSAGE_API_UNAVAILABLE,
    MESSAGE_FROM_CACHE,
    MESSAGE_NOT_CONFIGURED,
    ListeningService,
    get_listening_service,
)

PREFIX = "/api/v1/mentionlytics"


def _service(handler, token=""):
    async def no_sleep(delay):
        return None

    cache = ResponseCache()
    client = MentionlyticsClient(
        api_token=token,
        base_url="https://api.test/v1",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        limiter=RateLimiter(RateLimitPolicy(max_attempts=1000, window_seconds=60)),
        cache=cache,
        retries=1,
        sleep=no_sleep,
    )
    return ListeningService(client=client, cache=cache, rng=random.Random(3))


@pytest_asyncio.fixture
async def mock_client(app, client):
    """Client whose listening service has no API token."""
    service = _service(lambda request: httpx.Response(200, json={}))
    app.dependency_overrides[get_listening_service] = lambda: service
    yield client


class TestMockResponses:
    @pytest.mark.asyncio
    async def test_mentions(self, mock_client):
        response = await mock_client.get(f"{PREFIX}/mentions", params={"limit": 5})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == MESSAGE_NOT_CONFIGURED
        assert len(body["data"]) == 5

    @pytest.mark.asyncio
    async def test_repeated_request_is_cached(self, mock_client):
        first = await mock_client.get(f"{PREFIX}/sentiment", params={"keyword": "brand"})
        second = await mock_client.get(f"{PREFIX}/sentiment", params={"keyword": "brand"})

        assert second.json()["message"] == MESSAGE_FROM_CACHE
        assert second.json()["data"] == first.json()["data"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "path",
        ["mentions", "sentiment", "trending", "mentions/geo", "influencers", "share-of-voice", "feed"],
    )
    async def test_every_endpoint_answers(self, mock_client, path):
        response = await mock_client.get(f"{PREFIX}/{path}")
        assert response.status_code == 200
        assert response.json()["success"] is True

    @pytest.mark.asyncio
    async def test_geo_limit_caps_rows(self, mock_client):
        response = await mock_client.get(f"{PREFIX}/mentions/geo", params={"limit": 2})
        assert len(response.json()["data"]) == 2

    @pytest.mark.asyncio
    async def test_share_of_voice_brands(self, mock_client):
        response = await mock_client.get(
            f"{PREFIX}/share-of-voice", params={"brands": "Acme, Globex,Initech"}
        )

        data = response.json()["data"]
        assert [row["brand"] for row in data] == ["Acme", "Globex", "Initech"]
        assert sum(row["percentage"] for row in data) == 100

    @pytest.mark.asyncio
    async def test_share_of_voice_default_brand(self, mock_client):
        response = await mock_client.get(f"{PREFIX}/share-of-voice")
        assert response.json()["data"][0]["brand"] == "YourBrand"


class TestValidation:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("path", "params"),
        [
            ("mentions", {"limit": 0}),
            ("mentions", {"limit": 101}),
            ("mentions", {"offset": -1}),
            ("mentions", {"platform": "myspace"}),
            ("mentions", {"sentiment": "angry"}),
            ("mentions", {"country": "USA"}),
            ("mentions", {"date_from": "yesterday"}),
            ("mentions", {"keyword": "x" * 101}),
            ("trending", {"period": "2d"}),
            ("trending", {"limit": 21}),
            ("trending", {"min_mentions": 0}),
            ("influencers", {"platform": "reddit"}),
            ("influencers", {"min_followers": -5}),
            ("mentions/geo", {"limit": 51}),
            ("feed", {"limit": 51}),
        ],
    )
    async def test_invalid_query_is_422(self, mock_client, path, params):
        response = await mock_client.get(f"{PREFIX}/{path}", params=params)
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_unknown_feed_type_is_400(self, mock_client):
        response = await mock_client.get(f"{PREFIX}/feed", params={"types": "mention,gossip"})

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_request"

    @pytest.mark.asyncio
    async def test_too_many_brands_is_400(self, mock_client):
        brands = ",".join(f"brand{i}" for i in range(11))
        response = await mock_client.get(f"{PREFIX}/share-of-voice", params={"brands": brands})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_long_brand_is_400(self, mock_client):
        response = await mock_client.get(
            f"{PREFIX}/share-of-voice", params={"brands": "b" * 51}
        )
        assert response.status_code == 400


class TestUpstream:
    @pytest.mark.asyncio
    async def test_upstream_data_is_normalized(self, app, client):
        payload = {
            "data": [
                {
                    "topic": "launch",
                    "mentions_count": 40,
                    "growth_rate": 12.5,
                    "avg_sentiment": 0.4,
                }
            ]
        }
        service = _service(lambda request: httpx.Response(200, json=payload), token="token")
        app.dependency_overrides[get_listening_service] = lambda: service

        response = await client.get(f"{PREFIX}/trending")

        body = response.json()
        assert body["success"] is True
        assert body["message"] is None
        assert body["data"] == [
            {"topic": "launch", "mentions": 40, "growth_rate": 12.5, "sentiment": 0.4}
        ]

    @pytest.mark.asyncio
    async def test_upstream_failure_returns_mock_with_200(self, app, client):
        service = _service(lambda request: httpx.Response(503), token="token")
        app.dependency_overrides[get_listening_service] = lambda: service

        response = await client.get(f"{PREFIX}/feed", params={"limit": 3})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is False
        assert body["message"] == MESSAGE_API_UNAVAILABLE
        assert len(body["data"]) == 3


class TestMistypedUpstreamData:
    @pytest.mark.asyncio
    async def test_null_trending_sentiment_falls_back_to_mock(self, app, client):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={
                "data": [
                    {
                        "topic": "launch",
                        "mentions_count": 40,
                        "growth_rate": 12.5,
                        "avg_sentiment": None,
                    }
                ]
            })

        service = _service(handler, token="token")
        app.dependency_overrides[get_listening_service] = lambda: service

        first = await client.get(f"{PREFIX}/trending", params={"limit": 3})
        second = await client.get(f"{PREFIX}/trending", params={"limit": 3})

        assert first.status_code == 200
        assert first.json()["success"] is False
        assert first.json()["message"] == MESSAGE_API_UNAVAILABLE
        assert len(first.json()["data"]) == 3
        assert all(isinstance(row["sentiment"], float) for row in first.json()["data"])

        assert second.status_code == 200
        assert second.json()["message"] == MESSAGE_FROM_CACHE
        assert second.json()["data"] == first.json()["data"]
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_numeric_mention_id_falls_back_to_mock(self, app, client):
        payload = {
            "data": [
                {
                    "id": 12345,
                    "text": "Great launch",
                    "source": {"name": "Twitter"},
                    "author": {"name": "alice"},
                    "published_at": "2026-01-01T10:00:00Z",
                    "sentiment": {"label": "positive"},
                    "reach": 10,
                }
            ]
        }
        service = _service(lambda request: httpx.Response(200, json=payload), token="token")
        app.dependency_overrides[get_listening_service] = lambda: service

        response = await client.get(f"{PREFIX}/mentions", params={"limit": 2})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is False
        assert [row["id"] for row in body["data"]] == ["mock_mention_1", "mock_mention_2"]
