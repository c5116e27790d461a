"""Mock social-listening data.

Served when the Mentionlytics token is missing or the API is unavailable.
Every generator takes an optional ``random.Random`` so tests can seed it.
"""

import random
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence

MOCK_PLATFORMS = ["twitter", "facebook", "instagram", "linkedin", "reddit"]
MOCK_SENTIMENTS = ["positive", "negative", "neutral"]
MOCK_AUTHORS = ["TechEnthusiast", "MarketingPro", "BrandFan", "CriticalUser", "InfluencerX"]

MOCK_LOCATIONS = [
    ("United States", 39.8283, -98.5795),
    ("United Kingdom", 55.3781, -3.4360),
    ("Germany", 51.1657, 10.4515),
    ("France", 46.2276, 2.2137),
    ("Canada", 56.1304, -106.3468),
    ("Australia", -25.2744, 133.7751),
    ("Japan", 36.2048, 138.2529),
    ("Brazil", -14.2350, -51.9253),
]

MOCK_INFLUENCERS = [
    "TechGuru123", "DigitalMarketer", "BrandAdvocate", "IndustryExpert",
    "SocialInfluencer", "ContentCreator", "ThoughtLeader", "TrendSetter",
]
MOCK_INFLUENCER_PLATFORMS = ["twitter", "facebook", "instagram", "linkedin", "youtube"]

MOCK_TOPICS = [
    "artificial intelligence", "sustainability", "remote work", "digital transformation",
    "customer experience", "innovation", "marketing automation", "social media",
    "brand awareness", "product launch", "user experience", "data analytics",
]

MOCK_FEED_TYPES = ["mention", "trend", "influencer", "alert"]
MOCK_FEED_CONTENT = [
    "New mention detected with high engagement",
    "Trending topic gaining momentum",
    "Influencer shared your content",
    "Spike in negative sentiment detected",
    "Viral content opportunity identified",
    "Competitor activity increased",
    "Brand mention from verified account",
]


def _rng(rng: Optional[random.Random]) -> random.Random:
    return rng if rng is not None else random.Random()


def _recent_timestamp(rng: random.Random, max_age: timedelta) -> str:
    age = timedelta(seconds=rng.random() * max_age.total_seconds())
    return (datetime.now(timezone.utc) - age).isoformat()


def generate_mock_mentions(count: int = 20, rng: Optional[random.Random] = None) -> List[Dict[str, Any]]:
    rng = _rng(rng)
    return [
        {
            "id": f"mock_mention_{i + 1}",
            "text": (
                "This is a mock mention about the brand or product. It contains "
                f"sample content for testing purposes. Mention {i + 1}"
            ),
            "platform": rng.choice(MOCK_PLATFORMS),
            "author": rng.choice(MOCK_AUTHORS),
            "timestamp": _recent_timestamp(rng, timedelta(days=7)),
            "sentiment": rng.choice(MOCK_SENTIMENTS),
            "reach": rng.randint(100, 10099),
        }
        for i in range(count)
    ]


def generate_mock_sentiment(rng: Optional[random.Random] = None) -> Dict[str, int]:
    rng = _rng(rng)
    positive = rng.randint(20, 79)
    negative = rng.randint(5, 34)
    neutral = rng.randint(10, 49)
    return {
        "positive": positive,
        "negative": negative,
        "neutral": neutral,
        "total": positive + negative + neutral,
    }


def generate_mock_geo(count: int = 10, rng: Optional[random.Random] = None) -> List[Dict[str, Any]]:
    """At most one row per known location."""
    rng = _rng(rng)
    return [
        {
            "location": name,
            "mentions": rng.randint(10, 509),
            "sentiment": rng.uniform(-1, 1),
            "coordinates": {"lat": lat, "lng": lng},
        }
        for name, lat, lng in MOCK_LOCATIONS[:count]
    ]


def generate_mock_influencers(count: int = 10, rng: Optional[random.Random] = None) -> List[Dict[str, Any]]:
    rng = _rng(rng)
    influencers = []
    for i in range(count):
        name = MOCK_INFLUENCERS[i % len(MOCK_INFLUENCERS)]
        if i >= len(MOCK_INFLUENCERS):
            name = f"{name}{i + 1}"
        influencers.append({
            "name": name,
            "followers": rng.randint(5000, 104999),
            "engagement_rate": rng.uniform(1, 11),
            "platform": rng.choice(MOCK_INFLUENCER_PLATFORMS),
            "influence_score": rng.randint(1, 100),
        })
    return influencers


def generate_mock_share_of_voice(
    brands: Sequence[str], rng: Optional[random.Random] = None
) -> List[Dict[str, Any]]:
    """Split 100% across ``brands``; the last brand takes the remainder."""
    rng = _rng(rng)
    total_mentions = rng.randint(500, 1499)
    remaining = 100
    shares = []
    for index, brand in enumerate(brands):
        if index == len(brands) - 1:
            percentage = remaining
        else:
            fair_share = remaining / (len(brands) - index)
            percentage = int(rng.random() * fair_share) + 1
        remaining -= percentage
        shares.append({
            "brand": brand,
            "percentage": percentage,
            "mentions": int(percentage / 100 * total_mentions),
            "sentiment": rng.uniform(-1, 1),
        })
    return shares


def generate_mock_trending(count: int = 10, rng: Optional[random.Random] = None) -> List[Dict[str, Any]]:
    rng = _rng(rng)
    return [
        {
            "topic": MOCK_TOPICS[i % len(MOCK_TOPICS)],
            "mentions": rng.randint(20, 219),
            "growth_rate": rng.uniform(-20, 80),
            "sentiment": rng.uniform(-1, 1),
        }
        for i in range(count)
    ]


def generate_mock_feed(count: int = 20, rng: Optional[random.Random] = None) -> List[Dict[str, Any]]:
    rng = _rng(rng)
    return [
        {
            "type": rng.choice(MOCK_FEED_TYPES),
            "content": rng.choice(MOCK_FEED_CONTENT),
            "timestamp": _recent_timestamp(rng, timedelta(hours=24)),
            "engagement": rng.randint(10, 1009),
        }
        for _ in range(count)
    ]
