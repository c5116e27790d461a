"""Tests for mock social-listening data."""

import random
from datetime import datetime

import pytest

from warroom.app.services import mock_data


@pytest.fixture
def rng():
    return random.Random(42)


def test_mentions_shape(rng):
    mentions = mock_data.generate_mock_mentions(5, rng)

    assert [m["id"] for m in mentions] == [f"mock_mention_{i}" for i in range(1, 6)]
    for mention in mentions:
        assert mention["platform"] in mock_data.MOCK_PLATFORMS
        assert mention["sentiment"] in {"positive", "negative", "neutral"}
        assert 100 <= mention["reach"] <= 10099
        assert datetime.fromisoformat(mention["timestamp"]).tzinfo is not None


def test_seeded_generators_are_reproducible():
    first = mock_data.generate_mock_trending(5, random.Random(7))
    second = mock_data.generate_mock_trending(5, random.Random(7))
    assert first == second


def test_sentiment_total_is_sum(rng):
    sentiment = mock_data.generate_mock_sentiment(rng)
    assert sentiment["total"] == (
        sentiment["positive"] + sentiment["negative"] + sentiment["neutral"]
    )


def test_geo_is_capped_at_known_locations(rng):
    assert len(mock_data.generate_mock_geo(3, rng)) == 3
    locations = mock_data.generate_mock_geo(50, rng)
    assert len(locations) == len(mock_data.MOCK_LOCATIONS)
    assert len({row["location"] for row in locations}) == len(locations)


def test_influencer_names_stay_unique(rng):
    influencers = mock_data.generate_mock_influencers(12, rng)
    names = [row["name"] for row in influencers]
    assert len(set(names)) == 12


@pytest.mark.parametrize(
    "brands",
    [["Solo"], ["A", "B"], ["A", "B", "C", "D", "E"], [f"B{i}" for i in range(10)]],
)
def test_share_of_voice_sums_to_100(brands):
    for seed in range(20):
        shares = mock_data.generate_mock_share_of_voice(brands, random.Random(seed))
        assert [row["brand"] for row in shares] == brands
        assert sum(row["percentage"] for row in shares) == 100


def test_single_brand_takes_everything(rng):
    [share] = mock_data.generate_mock_share_of_voice(["Only"], rng)
    assert share["percentage"] == 100


def test_feed_types(rng):
    feed = mock_data.generate_mock_feed(8, rng)
    assert len(feed) == 8
    assert {item["type"] for item in feed} <= set(mock_data.MOCK_FEED_TYPES)
