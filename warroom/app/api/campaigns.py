"""Campaign endpoints."""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy.exc import SQLAlchemyError

from warroom.app.core.logging import get_logger
from warroom.app.db.crud import (
    create_campaign,
    get_campaign_by_id,
    list_campaigns,
    update_campaign,
)
from warroom.app.db.dependencies import SessionDep
from warroom.app.db.models import Campaign
from warroom.app.exceptions import InvalidRequestError, NotFoundError

router = APIRouter(prefix="/campaigns", tags=["campaigns"])
logger = get_logger(__name__)


class CampaignCreate(BaseModel):
    """Schema for creating a campaign."""

    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    start_date: datetime
    end_date: Optional[datetime] = None
    budget: Optional[float] = Field(None, ge=0)

    @field_validator("end_date")
    @classmethod
    def validate_date_range(cls, end_date: Optional[datetime], info) -> Optional[datetime]:
        start_date = info.data.get("start_date")
        if end_date is not None and start_date is not None and end_date < start_date:
            raise ValueError("end_date must be >= start_date")
        return end_date


class CampaignUpdate(BaseModel):
    """Schema for a partial campaign update."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    budget: Optional[float] = Field(None, ge=0)
    status: Optional[str] = Field(None, min_length=1, max_length=50)


class CampaignResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]
    start_date: datetime
    end_date: Optional[datetime]
    budget: Optional[float]
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CampaignListResponse(BaseModel):
    campaigns: List[CampaignResponse]


@router.post("", response_model=CampaignResponse, status_code=status.HTTP_201_CREATED)
async def create(data: CampaignCreate, session: SessionDep) -> Campaign:
    """Create a new campaign."""
    try:
        return await create_campaign(session, **data.model_dump())
    except SQLAlchemyError as e:
        logger.error(f"Database error creating campaign: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database error occurred while creating the campaign",
        )


@router.get("", response_model=CampaignListResponse)
async def list_all(
    session: SessionDep,
    status_filter: Optional[str] = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
):
    """List campaigns, newest first."""
    try:
        campaigns = await list_campaigns(
            session, status=status_filter, limit=limit, offset=offset
        )
        return {"campaigns": campaigns}
    except SQLAlchemyError as e:
        logger.error(f"Database error listing campaigns: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database error occurred while listing campaigns",
        )


@router.get("/{campaign_id}", response_model=CampaignResponse)
async def get(campaign_id: int, session: SessionDep) -> Campaign:
    try:
        campaign = await get_campaign_by_id(session, campaign_id)
    except SQLAlchemyError as e:
        logger.error(f"Database error loading campaign {campaign_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database error occurred while loading the campaign",
        )
    if campaign is None:
        raise NotFoundError("campaign not found")
    return campaign


@router.put("/{campaign_id}", response_model=CampaignResponse)
async def update(campaign_id: int, data: CampaignUpdate, session: SessionDep) -> Campaign:
    """Update the fields present in the request body."""
    update_data = data.model_dump(exclude_unset=True)
    if not update_data:
        raise InvalidRequestError("no fields to update")

    try:
        campaign = await update_campaign(session, campaign_id, **update_data)
    except SQLAlchemyError as e:
        logger.error(
            f"Database error updating campaign {campaign_id}: {e}",
            extra={"campaign_id": campaign_id},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database error occurred while updating the campaign",
        )
    if campaign is None:
        raise NotFoundError("campaign not found")
    return campaign
