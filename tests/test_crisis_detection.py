"""Tests for rule-based crisis detection."""

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio

from warroom.app.db.crud import create_campaign, create_mention, list_open_events
from warroom.app.services.crisis_detection import (
    EVENT_DESCRIPTION,
    KEYWORD_SEVERITY,
    CrisisDetectionEngine,
    CrisisMetrics,
    DetectedCrisis,
    calculate_impact_score,
    clamp_severity,
    estimate_impact,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def campaign(db_session):
    return await create_campaign(
        db_session, name="Spring Launch", start_date=NOW - timedelta(days=30)
    )


@pytest.fixture
def engine():
    return CrisisDetectionEngine(clock=lambda: NOW)


async def add_mention(session, campaign, age, content="Nice product", sentiment=None, reach=None):
    return await create_mention(
        session,
        campaign_id=campaign.id,
        platform="twitter",
        content=content,
        mentioned_at=NOW - age,
        sentiment=sentiment,
        reach=reach,
    )


class TestHelpers:
    @pytest.mark.parametrize(
        ("value", "expected"), [(-3, 1), (0, 1), (1.9, 1), (5.5, 5), (10, 10), (42, 10)]
    )
    def test_clamp_severity(self, value, expected):
        assert clamp_severity(value) == expected

    @pytest.mark.parametrize(
        ("severity", "impact"),
        [(1, "low"), (4, "low"), (5, "medium"), (6, "medium"), (7, "high"), (8, "high"), (9, "critical")],
    )
    def test_estimate_impact(self, severity, impact):
        assert estimate_impact(severity) == impact

    def test_impact_score(self):
        assert calculate_impact_score(10, 5000, 0.5) == pytest.approx(3 + 2 + 15)

    def test_impact_score_is_capped(self):
        assert calculate_impact_score(1000, 10_000_000, 1.0) == 100.0


class TestDetection:
    @pytest.mark.asyncio
    async def test_no_mentions_no_crises(self, db_session, engine):
        assert await engine.detect_crisis_patterns(db_session) == []

    @pytest.mark.asyncio
    async def test_volume_spike(self, db_session, engine, campaign):
        await add_mention(db_session, campaign, timedelta(hours=30))
        for hours in (1, 2, 3, 4):
            await add_mention(db_session, campaign, timedelta(hours=hours), reach=100)

        crises = await engine.detect_crisis_patterns(db_session)

        assert len(crises) == 1
        spike = crises[0]
        assert spike.trigger_type == "volume_spike"
        assert spike.severity == 8
        assert spike.estimated_impact == "high"
        assert spike.metrics.mention_spike == 4.0
        assert spike.mention_count == 4
        assert spike.estimated_reach == 400
        assert spike.id == f"spike_{int(NOW.timestamp() * 1000)}"

    @pytest.mark.asyncio
    async def test_empty_previous_window_counts_as_one(self, db_session, engine, campaign):
        for hours in (1, 2, 3):
            await add_mention(db_session, campaign, timedelta(hours=hours))

        spike = await engine.detect_mention_spike(db_session, NOW)

        assert spike.metrics.mention_spike == 3.0
        assert spike.severity == 6

    @pytest.mark.asyncio
    async def test_modest_growth_is_not_reported(self, db_session, engine, campaign):
        await add_mention(db_session, campaign, timedelta(hours=30))
        await add_mention(db_session, campaign, timedelta(hours=1))

        assert await engine.detect_crisis_patterns(db_session) == []

    @pytest.mark.asyncio
    async def test_sentiment_drop(self, db_session, engine, campaign):
        await add_mention(db_session, campaign, timedelta(days=3), sentiment=0.5)
        await add_mention(db_session, campaign, timedelta(days=4), sentiment=0.5)
        await add_mention(db_session, campaign, timedelta(hours=1), sentiment=-0.5, reach=2500)

        crises = await engine.detect_crisis_patterns(db_session)

        assert [c.trigger_type for c in crises] == ["sentiment_drop"]
        drop = crises[0]
        assert drop.severity == 10
        assert drop.estimated_impact == "critical"
        assert drop.metrics.sentiment_drop == pytest.approx(1.0)
        assert drop.mention_count == 1
        assert drop.estimated_reach == 2500

    @pytest.mark.asyncio
    async def test_keyword_alert(self, db_session, engine, campaign):
        await add_mention(
            db_session, campaign, timedelta(minutes=30),
            content="Customers threaten a LAWSUIT over the recall", reach=700,
        )
        # Outside the two hour window
        await add_mention(db_session, campaign, timedelta(hours=3), content="Boycott now")

        crises = await engine.detect_crisis_patterns(db_session)

        assert len(crises) == 1
        alert = crises[0]
        assert alert.trigger_type == "keyword_alert"
        assert alert.title == 'Crisis Keyword Detected: "lawsuit"'
        assert alert.severity == KEYWORD_SEVERITY
        assert alert.estimated_impact == "high"
        assert alert.mention_count == 1
        assert alert.estimated_reach == 700

    @pytest.mark.asyncio
    async def test_custom_keywords(self, db_session, campaign):
        engine = CrisisDetectionEngine(keywords=["outage"], clock=lambda: NOW)
        await add_mention(db_session, campaign, timedelta(minutes=5), content="Another outage today")
        await add_mention(db_session, campaign, timedelta(minutes=6), content="Total scam")

        crises = await engine.detect_keyword_alerts(db_session, NOW)

        assert [c.id for c in crises] == [f"keyword_outage_{int(NOW.timestamp() * 1000)}"]

    @pytest.mark.asyncio
    async def test_explicit_now_overrides_clock(self, db_session, engine, campaign):
        later = NOW + timedelta(days=10)
        for hours in (1, 2, 3, 4):
            await add_mention(db_session, campaign, timedelta(hours=hours))

        assert await engine.detect_crisis_patterns(db_session, now=later) == []


class TestCreateCrisisEvent:
    @pytest.mark.asyncio
    async def test_persists_active_event(self, db_session, engine):
        crisis = DetectedCrisis(
            id="sentiment_1",
            title="Negative Sentiment Spike Detected",
            severity=7,
            trigger_type="sentiment_drop",
            estimated_impact="high",
            metrics=CrisisMetrics(sentiment_drop=-0.6),
            mention_count=20,
            estimated_reach=10_000,
        )

        event = await engine.create_crisis_event(db_session, crisis)

        assert event.id is not None
        assert event.status == "active"
        assert event.description == EVENT_DESCRIPTION
        assert event.negative_sentiment_ratio == pytest.approx(0.6)
        assert event.details["trigger_type"] == "sentiment_drop"
        assert event.details["estimated_impact"] == "high"
        assert event.details["sentiment_drop"] == pytest.approx(-0.6)
        assert event.details["impact_score"] == pytest.approx(20 * 0.3 + 10 * 0.4 + 0.6 * 30)

        assert [e.id for e in await list_open_events(db_session)] == [event.id]
