"""Social-listening proxy endpoints (Mentionlytics)."""

from datetime import datetime
from typing import Annotated, Any, Dict, Generic, List, Literal, Optional, TypeVar

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from warroom.app.services.listening import (
    DEFAULT_BRANDS,
    DEFAULT_FEED_TYPES,
    FEED,
    FEED_TYPES,
    GEO,
    INFLUENCERS,
    MENTIONS,
    SENTIMENT,
    SHARE_OF_VOICE,
    TRENDING,
    FeedItem,
    GeoLocation,
    Influencer,
    ListeningEndpoint,
    ListeningService,
    MentionItem,
    SentimentLabel,
    SentimentSummary,
    ShareOfVoice,
    TrendingTopic,
    get_listening_service,
    parse_list_param,
)

router = APIRouter(prefix="/api/v1/mentionlytics", tags=["mentionlytics"])

Platform = Literal[
    "twitter", "facebook", "instagram", "linkedin", "youtube", "reddit", "news", "blogs"
]
InfluencerPlatform = Literal["twitter", "facebook", "instagram", "linkedin", "youtube"]
TrendingPeriod = Literal["1h", "6h", "24h", "7d"]

Keyword = Annotated[Optional[str], Query(min_length=1, max_length=100)]
CountryCode = Annotated[Optional[str], Query(min_length=2, max_length=2)]
ServiceDep = Annotated[ListeningService, Depends(get_listening_service)]

T = TypeVar("T")


class ListeningResponse(BaseModel, Generic[T]):
    """Envelope shared by every listening endpoint."""

    data: T
    success: bool
    message: Optional[str] = None


async def _fetch(
    service: ListeningService, endpoint: ListeningEndpoint, params: Dict[str, Any]
) -> Dict[str, Any]:
    result = await service.fetch(endpoint, params)
    return {"data": result.data, "success": result.success, "message": result.message}


@router.get("/mentions", response_model=ListeningResponse[List[MentionItem]])
async def get_mentions(
    service: ServiceDep,
    keyword: Keyword = None,
    platform: Optional[Platform] = None,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
    offset: Annotated[int, Query(ge=0)] = 0,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    sentiment: Optional[SentimentLabel] = None,
    country: CountryCode = None,
):
    """Mentions matching the filters."""
    return await _fetch(service, MENTIONS, {
        "keyword": keyword,
        "platform": platform,
        "limit": limit,
        "offset": offset,
        "date_from": date_from,
        "date_to": date_to,
        "sentiment": sentiment,
        "country": country,
    })


@router.get("/sentiment", response_model=ListeningResponse[SentimentSummary])
async def get_sentiment(
    service: ServiceDep,
    keyword: Keyword = None,
    platform: Optional[Platform] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    country: CountryCode = None,
):
    """Sentiment distribution summary."""
    return await _fetch(service, SENTIMENT, {
        "keyword": keyword,
        "platform": platform,
        "date_from": date_from,
        "date_to": date_to,
        "country": country,
    })


@router.get("/trending", response_model=ListeningResponse[List[TrendingTopic]])
async def get_trending(
    service: ServiceDep,
    keyword: Keyword = None,
    platform: Optional[Platform] = None,
    limit: Annotated[int, Query(ge=1, le=20)] = 10,
    period: TrendingPeriod = "24h",
    min_mentions: Annotated[int, Query(ge=1)] = 5,
):
    return await _fetch(service, TRENDING, {
        "keyword": keyword,
        "platform": platform,
        "limit": limit,
        "period": period,
        "min_mentions": min_mentions,
    })


@router.get("/mentions/geo", response_model=ListeningResponse[List[GeoLocation]])
async def get_geo(
    service: ServiceDep,
    keyword: Keyword = None,
    platform: Optional[Platform] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    limit: Annotated[int, Query(ge=1, le=50)] = 10,
):
    """Mention counts and sentiment per location."""
    return await _fetch(service, GEO, {
        "keyword": keyword,
        "platform": platform,
        "date_from": date_from,
        "date_to": date_to,
        "limit": limit,
    })


@router.get("/influencers", response_model=ListeningResponse[List[Influencer]])
async def get_influencers(
    service: ServiceDep,
    keyword: Keyword = None,
    platform: Optional[InfluencerPlatform] = None,
    min_followers: Annotated[int, Query(ge=0)] = 1000,
    limit: Annotated[int, Query(ge=1, le=50)] = 10,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
):
    return await _fetch(service, INFLUENCERS, {
        "keyword": keyword,
        "platform": platform,
        "min_followers": min_followers,
        "limit": limit,
        "date_from": date_from,
        "date_to": date_to,
    })


@router.get("/share-of-voice", response_model=ListeningResponse[List[ShareOfVoice]])
async def get_share_of_voice(
    service: ServiceDep,
    brands: Annotated[
        Optional[str], Query(description="Comma-separated brand names")
    ] = None,
    platform: Optional[Platform] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    country: CountryCode = None,
):
    """Share of voice across the given brands (``YourBrand`` if none)."""
    brand_list = parse_list_param(
        brands, name="brands", default=DEFAULT_BRANDS, max_items=10, max_length=50
    )
    return await _fetch(service, SHARE_OF_VOICE, {
        "brands": brand_list,
        "platform": platform,
        "date_from": date_from,
        "date_to": date_to,
        "country": country,
    })


@router.get("/feed", response_model=ListeningResponse[List[FeedItem]])
async def get_feed(
    service: ServiceDep,
    keyword: Keyword = None,
    types: Annotated[
        Optional[str], Query(description="Comma-separated: mention, trend, influencer, alert")
    ] = None,
    limit: Annotated[int, Query(ge=1, le=50)] = 20,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
):
    """Activity feed of mentions, trends, influencer activity and alerts."""
    type_list = parse_list_param(
        types, name="types", default=DEFAULT_FEED_TYPES, allowed=FEED_TYPES
    )
    return await _fetch(service, FEED, {
        "keyword": keyword,
        "types": type_list,
        "limit": limit,
        "date_from": date_from,
        "date_to": date_to,
    })
