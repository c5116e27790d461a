"""Crisis monitoring endpoints."""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.exc import SQLAlchemyError

from warroom.app.core.logging import get_logger
from warroom.app.db.crud import (
    acknowledge_event,
    get_dashboard_stats,
    get_event_history,
    list_open_events,
    resolve_event,
)
from warroom.app.db.dependencies import SessionDep
from warroom.app.db.models import CrisisEvent
from warroom.app.exceptions import NotFoundError
from warroom.app.services.crisis_detection import crisis_engine

router = APIRouter(prefix="/monitoring/crisis", tags=["crisis"])
logger = get_logger(__name__)

CRITICAL_SEVERITY = 9


class CrisisEventResponse(BaseModel):
    id: int
    title: str
    description: Optional[str]
    severity: int
    status: str
    detected_at: datetime
    acknowledged_at: Optional[datetime]
    resolved_at: Optional[datetime]
    mention_count: int
    negative_sentiment_ratio: float
    estimated_reach: int
    metadata: Optional[Dict[str, Any]] = Field(None, validation_alias="details")
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CrisisMetricsResponse(BaseModel):
    mention_spike: float
    sentiment_drop: float
    reach_increase: float


class DetectedCrisisResponse(BaseModel):
    id: str
    title: str
    severity: int
    trigger_type: str
    metrics: CrisisMetricsResponse
    estimated_impact: Literal["low", "medium", "high", "critical"]


class DetectionResponse(BaseModel):
    alerts: List[DetectedCrisisResponse]
    events: List[CrisisEventResponse]


class ActiveCrisesResponse(BaseModel):
    crises: List[CrisisEventResponse]
    total_active: int
    critical_count: int
    estimated_total_reach: int


class AcknowledgeRequest(BaseModel):
    acknowledged_by: Optional[str] = None
    notes: Optional[str] = None


class ResolveRequest(BaseModel):
    resolved_by: Optional[str] = None
    resolution: Optional[str] = None
    preventive_measures: Optional[str] = None


class HistoryStatistics(BaseModel):
    average_resolution_time: float
    most_common_severity: int
    total_reach: int


class HistoryResponse(BaseModel):
    events: List[CrisisEventResponse]
    total: int
    statistics: HistoryStatistics


class SeverityDistribution(BaseModel):
    low: int
    medium: int
    high: int
    critical: int


class StatusBreakdown(BaseModel):
    active: int
    acknowledged: int
    resolved: int


class TimeToResolution(BaseModel):
    average: float
    median: float


class DashboardResponse(BaseModel):
    active_crises: int
    total_crises: int
    average_severity: float
    recent_events: List[CrisisEventResponse]
    severity_distribution: SeverityDistribution
    status_breakdown: StatusBreakdown
    time_to_resolution: TimeToResolution


def _database_error(action: str, e: SQLAlchemyError) -> HTTPException:
    logger.error(f"Database error {action}: {e}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Database error occurred while {action}",
    )


@router.post("/detect", response_model=DetectionResponse)
async def detect(session: SessionDep):
    """Run a detection sweep and record a crisis event per signal."""
    try:
        crises = await crisis_engine.detect_crisis_patterns(session)
        events = [
            await crisis_engine.create_crisis_event(session, crisis, auto_commit=False)
            for crisis in crises
        ]
        await session.commit()
    except SQLAlchemyError as e:
        raise _database_error("running crisis detection", e)
    return {"alerts": [crisis.to_dict() for crisis in crises], "events": events}


@router.get("/active", response_model=ActiveCrisesResponse)
async def active(session: SessionDep):
    """Active and acknowledged crises, most severe first."""
    try:
        crises = await list_open_events(session)
    except SQLAlchemyError as e:
        raise _database_error("listing active crises", e)
    return {
        "crises": crises,
        "total_active": len(crises),
        "critical_count": sum(1 for c in crises if c.severity >= CRITICAL_SEVERITY),
        "estimated_total_reach": sum(c.estimated_reach or 0 for c in crises),
    }


@router.post("/acknowledge/{event_id}", response_model=CrisisEventResponse)
async def acknowledge(
    event_id: int, data: AcknowledgeRequest, session: SessionDep
) -> CrisisEvent:
    try:
        event = await acknowledge_event(
            session, event_id, acknowledged_by=data.acknowledged_by, notes=data.notes
        )
    except SQLAlchemyError as e:
        raise _database_error("acknowledging the crisis", e)
    if event is None:
        raise NotFoundError("crisis event not found or already acknowledged")
    return event


@router.put("/resolve/{event_id}", response_model=CrisisEventResponse)
async def resolve(
    event_id: int, data: ResolveRequest, session: SessionDep
) -> CrisisEvent:
    try:
        event = await resolve_event(session, event_id, **data.model_dump())
    except SQLAlchemyError as e:
        raise _database_error("resolving the crisis", e)
    if event is None:
        raise NotFoundError("crisis event not found or already resolved")
    return event


@router.get("/history", response_model=HistoryResponse)
async def history(
    session: SessionDep,
    status_filter: Optional[str] = Query(None, alias="status"),
    severity: Optional[int] = Query(None, ge=1, le=10),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
):
    try:
        return await get_event_history(
            session, status=status_filter, severity=severity, limit=limit, offset=offset
        )
    except SQLAlchemyError as e:
        raise _database_error("loading crisis history", e)


@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(session: SessionDep):
    try:
        return await get_dashboard_stats(session)
    except SQLAlchemyError as e:
        raise _database_error("building the crisis dashboard", e)
