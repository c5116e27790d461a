"""Crisis alert CRUD operations."""
from typing import Any, Dict, List, Optional

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from warroom.app.db.models import CrisisAlert, utcnow

# Display order for the severity breakdown; unknown severities sort last
SEVERITY_ORDER = {"critical": 1, "high": 2, "medium": 3, "low": 4}


async def create_alert(
    session: AsyncSession,
    campaign_id: int,
    alert_type: str,
    severity: str,
    title: str,
    description: str,
    source_url: Optional[str] = None,
    auto_commit: bool = True
) -> CrisisAlert:
    alert = CrisisAlert(
        campaign_id=campaign_id,
        alert_type=alert_type,
        severity=severity,
        title=title,
        description=description,
        source_url=source_url,
        status="active",
    )
    session.add(alert)
    if auto_commit:
        await session.commit()
    else:
        await session.flush()
    await session.refresh(alert)
    return alert


async def list_alerts(
    session: AsyncSession,
    campaign_id: Optional[int] = None,
    status: Optional[str] = None,
    severity: Optional[str] = None,
    limit: int = 50,
    offset: int = 0
) -> List[CrisisAlert]:
    """List alerts ordered by ``triggered_at``, newest first."""
    query = select(CrisisAlert)
    if campaign_id is not None:
        query = query.where(CrisisAlert.campaign_id == campaign_id)
    if status is not None:
        query = query.where(CrisisAlert.status == status)
    if severity is not None:
        query = query.where(CrisisAlert.severity == severity)
    query = query.order_by(CrisisAlert.triggered_at.desc(), CrisisAlert.id.desc())
    query = query.limit(limit).offset(offset)

    result = await session.execute(query)
    return list(result.scalars().all())


async def resolve_alert(
    session: AsyncSession,
    alert_id: int,
    auto_commit: bool = True
) -> Optional[CrisisAlert]:
    """Mark an active alert as resolved.

    Returns:
        The resolved alert, or None if it does not exist or is not active
    """
    result = await session.execute(
        select(CrisisAlert)
        .where(CrisisAlert.id == alert_id)
        .where(CrisisAlert.status == "active")
    )
    alert = result.scalar_one_or_none()
    if alert is None:
        return None

    alert.status = "resolved"
    alert.resolved_at = utcnow()
    if auto_commit:
        await session.commit()
    else:
        await session.flush()
    await session.refresh(alert)
    return alert


async def get_alerts_summary(
    session: AsyncSession,
    campaign_id: Optional[int] = None,
    recent_limit: int = 10
) -> Dict[str, Any]:
    """Totals, active severity breakdown and the most recent alerts.

    ``critical_alerts`` counts alerts that are both critical and active.
    """
    conditions = []
    if campaign_id is not None:
        conditions.append(CrisisAlert.campaign_id == campaign_id)

    is_active = CrisisAlert.status == "active"
    totals = await session.execute(
        select(
            func.count(CrisisAlert.id),
            func.count(case((is_active, 1))),
            func.count(case(((CrisisAlert.severity == "critical") & is_active, 1))),
        ).where(*conditions)
    )
    total_alerts, active_alerts, critical_alerts = totals.one()

    breakdown_rows = await session.execute(
        select(CrisisAlert.severity, func.count(CrisisAlert.id))
        .where(*conditions, is_active)
        .group_by(CrisisAlert.severity)
    )
    severity_breakdown = sorted(
        ({"severity": severity, "count": count} for severity, count in breakdown_rows.all()),
        key=lambda row: SEVERITY_ORDER.get(row["severity"], len(SEVERITY_ORDER) + 1),
    )

    recent = await session.execute(
        select(CrisisAlert)
        .where(*conditions)
        .order_by(CrisisAlert.triggered_at.desc(), CrisisAlert.id.desc())
        .limit(recent_limit)
    )

    return {
        "total_alerts": total_alerts,
        "active_alerts": active_alerts,
        "critical_alerts": critical_alerts,
        "severity_breakdown": severity_breakdown,
        "recent_alerts": list(recent.scalars().all()),
    }
