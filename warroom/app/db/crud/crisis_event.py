"""Crisis event CRUD operations."""
from collections import Counter
from datetime import datetime, timezone
from statistics import median
from typing import Any, Dict, List, Optional

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from warroom.app.db.models import CrisisEvent, utcnow

OPEN_STATUSES = ("active", "acknowledged")


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def resolution_hours(event: CrisisEvent) -> Optional[float]:
    """Hours from detection to resolution, None while unresolved."""
    if event.resolved_at is None or event.detected_at is None:
        return None
    delta = _as_utc(event.resolved_at) - _as_utc(event.detected_at)
    return delta.total_seconds() / 3600


async def create_crisis_event(
    session: AsyncSession,
    title: str,
    severity: int,
    description: Optional[str] = None,
    mention_count: int = 0,
    negative_sentiment_ratio: float = 0.0,
    estimated_reach: int = 0,
    details: Optional[Dict[str, Any]] = None,
    detected_at: Optional[datetime] = None,
    auto_commit: bool = True
) -> CrisisEvent:
    event = CrisisEvent(
        title=title,
        description=description,
        severity=severity,
        status="active",
        mention_count=mention_count,
        negative_sentiment_ratio=negative_sentiment_ratio,
        estimated_reach=estimated_reach,
        details=details,
        detected_at=detected_at or utcnow(),
    )
    session.add(event)
    if auto_commit:
        await session.commit()
    else:
        await session.flush()
    await session.refresh(event)
    return event


async def list_open_events(session: AsyncSession) -> List[CrisisEvent]:
    """Active and acknowledged events, most severe first."""
    result = await session.execute(
        select(CrisisEvent)
        .where(CrisisEvent.status.in_(OPEN_STATUSES))
        .order_by(CrisisEvent.severity.desc(), CrisisEvent.detected_at.desc())
    )
    return list(result.scalars().all())


async def _transition(
    session: AsyncSession,
    event_id: int,
    from_statuses: tuple[str, ...],
    to_status: str,
    timestamp_field: str,
    notes: Dict[str, Any],
    auto_commit: bool,
) -> Optional[CrisisEvent]:
    result = await session.execute(
        select(CrisisEvent)
        .where(CrisisEvent.id == event_id)
        .where(CrisisEvent.status.in_(from_statuses))
    )
    event = result.scalar_one_or_none()
    if event is None:
        return None

    now = utcnow()
    event.status = to_status
    setattr(event, timestamp_field, now)
    # Reassign so the JSON column is flagged dirty
    event.details = {**(event.details or {}), **notes}
    event.updated_at = now

    if auto_commit:
        await session.commit()
    else:
        await session.flush()
    await session.refresh(event)
    return event


async def acknowledge_event(
    session: AsyncSession,
    event_id: int,
    acknowledged_by: Optional[str] = None,
    notes: Optional[str] = None,
    auto_commit: bool = True
) -> Optional[CrisisEvent]:
    """Move an active event to ``acknowledged``.

    Returns:
        The event, or None if it does not exist or is not active
    """
    metadata: Dict[str, Any] = {"acknowledged_by": acknowledged_by}
    if notes:
        metadata["notes"] = notes
    return await _transition(
        session, event_id, ("active",), "acknowledged", "acknowledged_at",
        metadata, auto_commit,
    )


async def resolve_event(
    session: AsyncSession,
    event_id: int,
    resolved_by: Optional[str] = None,
    resolution: Optional[str] = None,
    preventive_measures: Optional[str] = None,
    auto_commit: bool = True
) -> Optional[CrisisEvent]:
    """Move an active or acknowledged event to ``resolved``."""
    metadata = {
        "resolved_by": resolved_by,
        "resolution": resolution,
        "preventive_measures": preventive_measures,
    }
    return await _transition(
        session, event_id, OPEN_STATUSES, "resolved", "resolved_at",
        metadata, auto_commit,
    )


async def get_event_history(
    session: AsyncSession,
    status: Optional[str] = None,
    severity: Optional[int] = None,
    limit: int = 50,
    offset: int = 0
) -> Dict[str, Any]:
    """Filtered page of events plus statistics over resolved events.

    Returns:
        Dict with ``events``, ``total`` (matching rows, ignoring paging) and
        ``statistics`` (average resolution hours, most common severity and
        total reach of resolved events).
    """
    conditions = []
    if status is not None:
        conditions.append(CrisisEvent.status == status)
    if severity is not None:
        conditions.append(CrisisEvent.severity == severity)

    events = await session.execute(
        select(CrisisEvent)
        .where(*conditions)
        .order_by(CrisisEvent.detected_at.desc(), CrisisEvent.id.desc())
        .limit(limit)
        .offset(offset)
    )
    total = await session.scalar(
        select(func.count(CrisisEvent.id)).where(*conditions)
    )

    resolved = await session.execute(
        select(CrisisEvent).where(CrisisEvent.status == "resolved")
    )
    resolved_events = list(resolved.scalars().all())
    hours = [h for h in (resolution_hours(e) for e in resolved_events) if h is not None]
    severities = Counter(e.severity for e in resolved_events)

    return {
        "events": list(events.scalars().all()),
        "total": total or 0,
        "statistics": {
            "average_resolution_time": sum(hours) / len(hours) if hours else 0.0,
            "most_common_severity": severities.most_common(1)[0][0] if severities else 1,
            "total_reach": sum(e.estimated_reach or 0 for e in resolved_events),
        },
    }


async def get_dashboard_stats(
    session: AsyncSession,
    recent_limit: int = 10
) -> Dict[str, Any]:
    """Counts, severity bands, status breakdown and time to resolution."""
    severity = CrisisEvent.severity
    status = CrisisEvent.status
    row = (await session.execute(
        select(
            func.count(CrisisEvent.id),
            func.coalesce(func.avg(severity), 0),
            func.count(case((severity.between(1, 3), 1))),
            func.count(case((severity.between(4, 6), 1))),
            func.count(case((severity.between(7, 8), 1))),
            func.count(case((severity.between(9, 10), 1))),
            func.count(case((status == "active", 1))),
            func.count(case((status == "acknowledged", 1))),
            func.count(case((status == "resolved", 1))),
        )
    )).one()
    (
        total, average_severity, low, medium, high, critical,
        active, acknowledged, resolved_count,
    ) = row

    recent = await session.execute(
        select(CrisisEvent)
        .order_by(CrisisEvent.detected_at.desc(), CrisisEvent.id.desc())
        .limit(recent_limit)
    )

    resolved = await session.execute(
        select(CrisisEvent).where(CrisisEvent.status == "resolved")
    )
    hours = [
        h for h in (resolution_hours(e) for e in resolved.scalars().all())
        if h is not None
    ]

    return {
        "active_crises": active,
        "total_crises": total,
        "average_severity": float(average_severity),
        "recent_events": list(recent.scalars().all()),
        "severity_distribution": {
            "low": low,
            "medium": medium,
            "high": high,
            "critical": critical,
        },
        "status_breakdown": {
            "active": active,
            "acknowledged": acknowledged,
            "resolved": resolved_count,
        },
        "time_to_resolution": {
            "average": sum(hours) / len(hours) if hours else 0.0,
            "median": median(hours) if hours else 0.0,
        },
    }
