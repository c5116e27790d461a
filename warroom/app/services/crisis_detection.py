"""Rule-based crisis detection over stored mentions.

Three rules run on every sweep:

- volume spike: mentions in the last 24h against the 24h before
- sentiment drop: average sentiment of the last 6h against the baseline
  from 7 days ago up to 1 day ago
- crisis keywords: any mention in the last 2h containing a watched word

Time windows are computed from an explicit ``now`` so sweeps are
reproducible in tests.
"""

import math
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from warroom.app.core.logging import get_logger
from warroom.app.db.crud.crisis_event import create_crisis_event
from warroom.app.db.models import CrisisEvent, Mention, utcnow

logger = get_logger(__name__)

CRISIS_KEYWORDS = ("scandal", "boycott", "lawsuit", "controversy", "fraud", "scam")
REPORT_THRESHOLD = 5  # Spike and drop signals are reported above this severity
KEYWORD_SEVERITY = 8
EVENT_DESCRIPTION = "Crisis detected by automated monitoring system"


def clamp_severity(value: float) -> int:
    return min(10, max(1, math.floor(value)))


def estimate_impact(severity: int) -> str:
    if severity > 8:
        return "critical"
    if severity > 6:
        return "high"
    if severity > 4:
        return "medium"
    return "low"


def calculate_impact_score(mention_count: int, reach: int, sentiment_ratio: float) -> float:
    """Impact on a 0-100 scale."""
    return min(100.0, mention_count * 0.3 + reach / 1000 * 0.4 + sentiment_ratio * 30)


@dataclass
class CrisisMetrics:
    mention_spike: float = 0.0
    sentiment_drop: float = 0.0
    reach_increase: float = 0.0


@dataclass
class DetectedCrisis:
    """A crisis signal produced by one detection rule."""

    id: str
    title: str
    severity: int
    trigger_type: str
    estimated_impact: str
    metrics: CrisisMetrics = field(default_factory=CrisisMetrics)
    mention_count: int = 0
    estimated_reach: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class _WindowStats:
    count: int
    average_sentiment: float
    reach: int


class CrisisDetectionEngine:
    """Runs the detection rules and records crisis events.

    Usage:
        engine = CrisisDetectionEngine()
        crises = await engine.detect_crisis_patterns(session)
        for crisis in crises:
            await engine.create_crisis_event(session, crisis)
    """

    def __init__(
        self,
        keywords: Sequence[str] = CRISIS_KEYWORDS,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.keywords = tuple(keywords)
        self._clock = clock

    async def detect_crisis_patterns(
        self, session: AsyncSession, now: Optional[datetime] = None
    ) -> List[DetectedCrisis]:
        now = now or self._clock()
        crises: List[DetectedCrisis] = []

        spike = await self.detect_mention_spike(session, now)
        if spike.severity > REPORT_THRESHOLD:
            crises.append(spike)

        drop = await self.detect_sentiment_drop(session, now)
        if drop.severity > REPORT_THRESHOLD:
            crises.append(drop)

        crises.extend(await self.detect_keyword_alerts(session, now))

        logger.info(
            f"Crisis sweep found {len(crises)} signal(s)",
            extra={"triggers": [c.trigger_type for c in crises]},
        )
        return crises

    async def detect_mention_spike(
        self, session: AsyncSession, now: datetime
    ) -> DetectedCrisis:
        """Compare mention volume of the last 24h with the previous 24h.

        An empty previous window counts as one mention so the ratio stays
        finite.
        """
        current = await self._window_stats(session, now - timedelta(days=1), now)
        previous = await self._window_stats(
            session, now - timedelta(days=2), now - timedelta(days=1)
        )
        spike_ratio = current.count / (previous.count or 1)
        severity = clamp_severity(spike_ratio * 2)

        return DetectedCrisis(
            id=f"spike_{_millis(now)}",
            title="Mention Volume Spike Detected",
            severity=severity,
            trigger_type="volume_spike",
            estimated_impact=estimate_impact(severity),
            metrics=CrisisMetrics(mention_spike=spike_ratio),
            mention_count=current.count,
            estimated_reach=current.reach,
        )

    async def detect_sentiment_drop(
        self, session: AsyncSession, now: datetime
    ) -> DetectedCrisis:
        recent = await self._window_stats(session, now - timedelta(hours=6), now)
        baseline = await self._window_stats(
            session, now - timedelta(days=7), now - timedelta(days=1)
        )
        sentiment_drop = baseline.average_sentiment - recent.average_sentiment
        severity = clamp_severity(sentiment_drop * 10)

        return DetectedCrisis(
            id=f"sentiment_{_millis(now)}",
            title="Negative Sentiment Spike Detected",
            severity=severity,
            trigger_type="sentiment_drop",
            estimated_impact=estimate_impact(severity),
            metrics=CrisisMetrics(sentiment_drop=sentiment_drop),
            mention_count=recent.count,
            estimated_reach=recent.reach,
        )

    async def detect_keyword_alerts(
        self, session: AsyncSession, now: datetime
    ) -> List[DetectedCrisis]:
        """One high-impact signal per watched keyword seen in the last 2h."""
        since = now - timedelta(hours=2)
        crises = []
        for keyword in self.keywords:
            result = await session.execute(
                select(func.count(Mention.id), func.coalesce(func.sum(Mention.reach), 0))
                .where(func.lower(Mention.content).contains(keyword.lower()))
                .where(Mention.mentioned_at >= since)
                .where(Mention.mentioned_at <= now)
            )
            count, reach = result.one()
            if count > 0:
                crises.append(DetectedCrisis(
                    id=f"keyword_{keyword}_{_millis(now)}",
                    title=f'Crisis Keyword Detected: "{keyword}"',
                    severity=KEYWORD_SEVERITY,
                    trigger_type="keyword_alert",
                    estimated_impact="high",
                    metrics=CrisisMetrics(mention_spike=count),
                    mention_count=count,
                    estimated_reach=int(reach),
                ))
        return crises

    async def create_crisis_event(
        self,
        session: AsyncSession,
        crisis: DetectedCrisis,
        auto_commit: bool = True,
    ) -> CrisisEvent:
        """Persist a detected crisis as an active crisis event."""
        negative_ratio = abs(crisis.metrics.sentiment_drop)
        details = {
            **asdict(crisis.metrics),
            "trigger_type": crisis.trigger_type,
            "estimated_impact": crisis.estimated_impact,
            "impact_score": calculate_impact_score(
                crisis.mention_count, crisis.estimated_reach, negative_ratio
            ),
        }
        event = await create_crisis_event(
            session,
            title=crisis.title,
            description=EVENT_DESCRIPTION,
            severity=crisis.severity,
            mention_count=crisis.mention_count,
            negative_sentiment_ratio=negative_ratio,
            estimated_reach=crisis.estimated_reach,
            details=details,
            auto_commit=auto_commit,
        )
        logger.warning(
            f"Crisis event recorded: {crisis.title}",
            extra={"event_id": event.id, "severity": crisis.severity},
        )
        return event

    @staticmethod
    async def _window_stats(
        session: AsyncSession, start: datetime, end: datetime
    ) -> _WindowStats:
        """Mention count, average sentiment and reach in ``[start, end)``."""
        result = await session.execute(
            select(
                func.count(Mention.id),
                func.coalesce(func.avg(Mention.sentiment), 0),
                func.coalesce(func.sum(Mention.reach), 0),
            )
            .where(Mention.mentioned_at >= start)
            .where(Mention.mentioned_at < end)
        )
        count, average, reach = result.one()
        return _WindowStats(count=count, average_sentiment=float(average), reach=int(reach))


def _millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


crisis_engine = CrisisDetectionEngine()
