"""Social-listening service backed by the Mentionlytics client.

Each proxied resource is described by a ``ListeningEndpoint``: the vendor
path, how validated query parameters map onto vendor parameters, how the
vendor payload is normalized, and which mock generator stands in when the
API cannot be used. ``ListeningService.fetch`` runs the shared flow:

    cache hit -> not configured (mock) -> API call -> fallback (mock)

Normalized and mock data are cached under the resource name, separate from
the raw payloads the client caches under ``"upstream:"`` keys.
"""

import random
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Literal, Mapping, Optional, Sequence

from pydantic import BaseModel, TypeAdapter, ValidationError

from warroom.app.core.cache import ResponseCache, get_cache
from warroom.app.core.config import settings
from warroom.app.core.logging import get_log_context, get_logger
from warroom.app.exceptions import (
    InvalidRequestError,
    InvalidUpstreamResponseError,
    WarRoomException,
)
from warroom.app.providers.mentionlytics import MentionlyticsClient, get_mentionlytics_client
from warroom.app.services import mock_data

logger = get_logger(__name__)

MESSAGE_FROM_CACHE = "Data retrieved from cache"
MESSAGE_NOT_CONFIGURED = "Mock data returned (API token not configured)"
MESSAGE_API_UNAVAILABLE = "API unavailable, returning mock data"

# Query parameter name -> vendor parameter name
VENDOR_PARAM_NAMES = {
    "keyword": "q",
    "platform": "source",
    "date_from": "from",
    "date_to": "to",
}

FEED_TYPES = ("mention", "trend", "influencer", "alert")
DEFAULT_BRANDS = ["YourBrand"]
DEFAULT_FEED_TYPES = ["mention"]


SentimentLabel = Literal["positive", "negative", "neutral"]


class MentionItem(BaseModel):
    id: str
    text: str
    platform: str
    author: str
    timestamp: str
    sentiment: SentimentLabel
    reach: int


class SentimentSummary(BaseModel):
    positive: int
    negative: int
    neutral: int
    total: int


class TrendingTopic(BaseModel):
    topic: Optional[str]
    mentions: int
    growth_rate: float
    sentiment: float


class Coordinates(BaseModel):
    lat: float
    lng: float


class GeoLocation(BaseModel):
    location: str
    mentions: int
    sentiment: float
    coordinates: Optional[Coordinates] = None


class Influencer(BaseModel):
    name: Optional[str]
    followers: int
    engagement_rate: float
    platform: str
    influence_score: float


class ShareOfVoice(BaseModel):
    brand: str
    percentage: float
    mentions: int
    sentiment: float


class FeedItem(BaseModel):
    type: str
    content: Optional[str]
    timestamp: Optional[str]
    engagement: int


@dataclass
class ListeningResult:
    """Envelope returned to the router."""

    data: Any
    success: bool
    message: Optional[str] = None


@dataclass(frozen=True)
class ListeningEndpoint:
    """How one proxied resource is fetched, normalized and mocked.

    ``schema`` validates the normalized data before it is cached or returned.
    """

    name: str
    vendor_endpoint: str
    vendor_params: Sequence[str]
    transform: Callable[[Any], Any]
    schema: TypeAdapter
    mock: Callable[[Mapping[str, Any], Optional[random.Random]], Any]

    def build_vendor_params(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        """Rename and serialize validated parameters for the vendor API.

        Datetimes become ISO-8601 strings and lists become comma-separated
        strings. None values are kept here; the client drops them.
        """
        vendor: Dict[str, Any] = {}
        for key in self.vendor_params:
            value = params.get(key)
            if isinstance(value, datetime):
                value = value.isoformat()
            elif isinstance(value, (list, tuple)):
                value = ",".join(value)
            vendor[VENDOR_PARAM_NAMES.get(key, key)] = value
        return vendor


def map_sentiment(label: Optional[str]) -> str:
    """Collapse a vendor sentiment label to positive, negative or neutral."""
    normalized = (label or "").lower()
    if "positive" in normalized:
        return "positive"
    if "negative" in normalized:
        return "negative"
    return "neutral"


def parse_list_param(
    raw: Optional[str],
    *,
    name: str,
    default: List[str],
    allowed: Optional[Iterable[str]] = None,
    max_items: Optional[int] = None,
    max_length: Optional[int] = None,
) -> List[str]:
    """Split a comma-separated query parameter and validate its items.

    Raises:
        InvalidRequestError: An item is empty, too long, not allowed, or
            there are too many items.
    """
    if not raw:
        return list(default)

    items = [item.strip() for item in raw.split(",")]
    if any(not item for item in items):
        raise InvalidRequestError(f"Invalid parameters: '{name}' contains an empty item")
    if max_items is not None and len(items) > max_items:
        raise InvalidRequestError(
            f"Invalid parameters: '{name}' accepts at most {max_items} items"
        )
    if max_length is not None:
        too_long = [item for item in items if len(item) > max_length]
        if too_long:
            raise InvalidRequestError(
                f"Invalid parameters: '{name}' items must be at most {max_length} characters"
            )
    if allowed is not None:
        allowed = set(allowed)
        unknown = [item for item in items if item not in allowed]
        if unknown:
            raise InvalidRequestError(
                f"Invalid parameters: unsupported {name} {', '.join(unknown)}"
            )
    return items


def _transform_mentions(payload: Any) -> List[Dict[str, Any]]:
    return [
        {
            "id": item["id"],
            "text": item["text"],
            "platform": item["source"]["name"].lower(),
            "author": item["author"]["name"],
            "timestamp": item["published_at"],
            "sentiment": map_sentiment(item["sentiment"]["label"]),
            "reach": item.get("reach") or 0,
        }
        for item in payload["data"]
    ]


def _transform_sentiment(payload: Any) -> Dict[str, Any]:
    distribution = payload["data"]["sentiment_distribution"]
    return {
        "positive": distribution["positive"],
        "negative": distribution["negative"],
        "neutral": distribution["neutral"],
        "total": distribution["total"],
    }


def _transform_trending(payload: Any) -> List[Dict[str, Any]]:
    return [
        {
            "topic": item.get("topic") or item.get("keyword"),
            "mentions": item["mentions_count"],
            "growth_rate": item["growth_rate"],
            "sentiment": item["avg_sentiment"],
        }
        for item in payload["data"]
    ]


def _transform_geo(payload: Any) -> List[Dict[str, Any]]:
    locations = []
    for item in payload["data"]:
        coordinates = item.get("coordinates")
        locations.append({
            "location": item["location"],
            "mentions": item["mentions_count"],
            "sentiment": item["avg_sentiment"],
            "coordinates": (
                {"lat": coordinates["latitude"], "lng": coordinates["longitude"]}
                if coordinates else None
            ),
        })
    return locations


def _transform_influencers(payload: Any) -> List[Dict[str, Any]]:
    return [
        {
            "name": item.get("name") or item.get("username"),
            "followers": item["followers_count"],
            "engagement_rate": item["engagement_rate"],
            "platform": item["platform"].lower(),
            "influence_score": item["influence_score"],
        }
        for item in payload["data"]
    ]


def _transform_share_of_voice(payload: Any) -> List[Dict[str, Any]]:
    return [
        {
            "brand": item["brand"],
            "percentage": item["percentage"],
            "mentions": item["mentions_count"],
            "sentiment": item["avg_sentiment"],
        }
        for item in payload["data"]["share_of_voice"]
    ]


def _transform_feed(payload: Any) -> List[Dict[str, Any]]:
    return [
        {
            "type": item["type"],
            "content": item.get("content") or item.get("description"),
            "timestamp": item.get("timestamp") or item.get("created_at"),
            "engagement": (item.get("engagement_metrics") or {}).get("total") or 0,
        }
        for item in payload["data"]
    ]


MENTIONS = ListeningEndpoint(
    name="mentions",
    vendor_endpoint="mentions",
    vendor_params=(
        "keyword", "platform", "limit", "offset",
        "date_from", "date_to", "sentiment", "country",
    ),
    transform=_transform_mentions,
    schema=TypeAdapter(List[MentionItem]),
    mock=lambda params, rng: mock_data.generate_mock_mentions(params.get("limit") or 20, rng),
)

SENTIMENT = ListeningEndpoint(
    name="sentiment",
    vendor_endpoint="sentiment",
    vendor_params=("keyword", "platform", "date_from", "date_to", "country"),
    transform=_transform_sentiment,
    schema=TypeAdapter(SentimentSummary),
    mock=lambda params, rng: mock_data.generate_mock_sentiment(rng),
)

TRENDING = ListeningEndpoint(
    name="trending",
    vendor_endpoint="trending",
    vendor_params=("keyword", "platform", "limit", "period", "min_mentions"),
    transform=_transform_trending,
    schema=TypeAdapter(List[TrendingTopic]),
    mock=lambda params, rng: mock_data.generate_mock_trending(params.get("limit") or 10, rng),
)

GEO = ListeningEndpoint(
    name="geo",
    vendor_endpoint="mentions/geography",
    vendor_params=("keyword", "platform", "date_from", "date_to", "limit"),
    transform=_transform_geo,
    schema=TypeAdapter(List[GeoLocation]),
    mock=lambda params, rng: mock_data.generate_mock_geo(params.get("limit") or 10, rng),
)

INFLUENCERS = ListeningEndpoint(
    name="influencers",
    vendor_endpoint="influencers",
    vendor_params=("keyword", "platform", "min_followers", "limit", "date_from", "date_to"),
    transform=_transform_influencers,
    schema=TypeAdapter(List[Influencer]),
    mock=lambda params, rng: mock_data.generate_mock_influencers(params.get("limit") or 10, rng),
)

SHARE_OF_VOICE = ListeningEndpoint(
    name="share-of-voice",
    vendor_endpoint="share-of-voice",
    vendor_params=("brands", "platform", "date_from", "date_to", "country"),
    transform=_transform_share_of_voice,
    schema=TypeAdapter(List[ShareOfVoice]),
    mock=lambda params, rng: mock_data.generate_mock_share_of_voice(
        params.get("brands") or DEFAULT_BRANDS, rng
    ),
)

FEED = ListeningEndpoint(
    name="feed",
    vendor_endpoint="feed",
    vendor_params=("keyword", "types", "limit", "date_from", "date_to"),
    transform=_transform_feed,
    schema=TypeAdapter(List[FeedItem]),
    mock=lambda params, rng: mock_data.generate_mock_feed(params.get("limit") or 20, rng),
)


class ListeningService:
    """Fetches social-listening data with caching and mock fallback.

    Upstream failures never reach the caller: they are logged and answered
    with mock data flagged ``success=False``.
    """

    def __init__(
        self,
        client: Optional[MentionlyticsClient] = None,
        cache: Optional[ResponseCache] = None,
        rng: Optional[random.Random] = None,
        default_ttl: Optional[float] = None,
        fallback_ttl: Optional[float] = None,
    ):
        self.client = client if client is not None else get_mentionlytics_client()
        self.cache = cache if cache is not None else get_cache()
        self._rng = rng
        self.default_ttl = settings.cache_default_ttl if default_ttl is None else default_ttl
        self.fallback_ttl = settings.cache_fallback_ttl if fallback_ttl is None else fallback_ttl

    async def fetch(
        self, endpoint: ListeningEndpoint, params: Mapping[str, Any]
    ) -> ListeningResult:
        """Return normalized data for ``endpoint`` given validated ``params``."""
        cache_key = self.cache.generate_key(endpoint.name, params)

        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.info(
                f"Returning cached {endpoint.name} data",
                extra=get_log_context(endpoint=endpoint.name),
            )
            return ListeningResult(cached, True, MESSAGE_FROM_CACHE)

        if not self.client.is_configured():
            logger.warning(
                "Mentionlytics API token not configured, using mock data",
                extra=get_log_context(endpoint=endpoint.name),
            )
            data = endpoint.mock(params, self._rng)
            self.cache.set(cache_key, data, ttl=self.fallback_ttl)
            return ListeningResult(data, True, MESSAGE_NOT_CONFIGURED)

        try:
            payload = await self.client.make_request(
                endpoint.vendor_endpoint, endpoint.build_vendor_params(params)
            )
            data = self._normalize(endpoint, payload)
        except WarRoomException as e:
            logger.error(
                "Mentionlytics API request failed",
                extra=get_log_context(
                    endpoint=endpoint.name, error=e.message, error_type=type(e).__name__
                ),
            )
            data = endpoint.mock(params, self._rng)
            self.cache.set(cache_key, data, ttl=self.fallback_ttl)
            return ListeningResult(data, False, MESSAGE_API_UNAVAILABLE)

        self.cache.set(cache_key, data, ttl=self.default_ttl)
        logger.info(
            f"Retrieved {endpoint.name} from Mentionlytics API",
            extra=get_log_context(
                endpoint=endpoint.name,
                count=len(data) if isinstance(data, list) else None,
            ),
        )
        return ListeningResult(data, True)

    @staticmethod
    def _normalize(endpoint: ListeningEndpoint, payload: Any) -> Any:
        try:
            data = endpoint.transform(payload)
            return endpoint.schema.dump_python(endpoint.schema.validate_python(data))
        except (KeyError, TypeError, AttributeError, ValidationError) as e:
            raise InvalidUpstreamResponseError(
                f"Unexpected {endpoint.name} payload: {e!r}", endpoint=endpoint.vendor_endpoint
            ) from e


_service_instance: ListeningService | None = None


def get_listening_service() -> ListeningService:
    """FastAPI dependency returning the process-wide listening service."""
    global _service_instance
    if _service_instance is None:
        _service_instance = ListeningService()
    return _service_instance


def reset_listening_service() -> None:
    global _service_instance
    _service_instance = None
