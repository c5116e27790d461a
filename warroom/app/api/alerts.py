"""Crisis alert endpoints."""

from datetime import datetime
from typing import List, Literal, Optional

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.exc import SQLAlchemyError

from warroom.app.core.logging import get_logger
from warroom.app.db.crud import (
    create_alert,
    get_alerts_summary,
    get_campaign_by_id,
    list_alerts,
    resolve_alert,
)
from warroom.app.db.dependencies import SessionDep
from warroom.app.db.models import CrisisAlert
from warroom.app.exceptions import NotFoundError

router = APIRouter(prefix="/alerts", tags=["alerts"])
logger = get_logger(__name__)

AlertSeverity = Literal["low", "medium", "high", "critical"]


class AlertCreate(BaseModel):
    campaign_id: int
    alert_type: str = Field(..., min_length=1, max_length=50)
    severity: AlertSeverity
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    source_url: Optional[str] = Field(None, max_length=2048)


class AlertResponse(BaseModel):
    id: int
    campaign_id: int
    alert_type: str
    severity: str
    title: str
    description: str
    source_url: Optional[str]
    triggered_at: datetime
    resolved_at: Optional[datetime]
    status: str

    model_config = ConfigDict(from_attributes=True)


class AlertListResponse(BaseModel):
    alerts: List[AlertResponse]


class SeverityStats(BaseModel):
    severity: str
    count: int


class AlertsSummary(BaseModel):
    total_alerts: int
    active_alerts: int
    critical_alerts: int
    severity_breakdown: List[SeverityStats]
    recent_alerts: List[AlertResponse]


def _database_error(action: str, e: SQLAlchemyError) -> HTTPException:
    logger.error(f"Database error {action}: {e}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Database error occurred while {action}",
    )


@router.post("", response_model=AlertResponse, status_code=status.HTTP_201_CREATED)
async def create(data: AlertCreate, session: SessionDep) -> CrisisAlert:
    """Raise an alert against a campaign."""
    try:
        if await get_campaign_by_id(session, data.campaign_id) is None:
            raise NotFoundError("campaign not found")
        return await create_alert(session, **data.model_dump())
    except SQLAlchemyError as e:
        raise _database_error("creating the alert", e)


@router.get("", response_model=AlertListResponse)
async def list_all(
    session: SessionDep,
    campaign_id: Optional[int] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    severity: Optional[str] = None,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
):
    try:
        alerts = await list_alerts(
            session,
            campaign_id=campaign_id,
            status=status_filter,
            severity=severity,
            limit=limit,
            offset=offset,
        )
        return {"alerts": alerts}
    except SQLAlchemyError as e:
        raise _database_error("listing alerts", e)


@router.get("/summary", response_model=AlertsSummary)
async def summary(session: SessionDep, campaign_id: Optional[int] = None):
    """Totals, active severity breakdown and the ten most recent alerts."""
    try:
        return await get_alerts_summary(session, campaign_id=campaign_id)
    except SQLAlchemyError as e:
        raise _database_error("summarizing alerts", e)


@router.post("/{alert_id}/resolve", response_model=AlertResponse)
async def resolve(alert_id: int, session: SessionDep) -> CrisisAlert:
    """Mark an active alert as resolved."""
    try:
        alert = await resolve_alert(session, alert_id)
    except SQLAlchemyError as e:
        raise _database_error("resolving the alert", e)
    if alert is None:
        raise NotFoundError("alert not found or already resolved")
    return alert
