"""Mention endpoints."""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.exc import SQLAlchemyError

from warroom.app.core.logging import get_logger
from warroom.app.db.crud import create_mention, get_campaign_by_id, list_mentions
from warroom.app.db.dependencies import SessionDep
from warroom.app.db.models import Mention
from warroom.app.exceptions import NotFoundError

router = APIRouter(prefix="/mentions", tags=["mentions"])
logger = get_logger(__name__)


class MentionCreate(BaseModel):
    campaign_id: int
    platform: str = Field(..., min_length=1, max_length=50)
    content: str = Field(..., min_length=1)
    author: Optional[str] = Field(None, max_length=255)
    url: Optional[str] = Field(None, max_length=2048)
    sentiment: Optional[float] = Field(None, ge=-1, le=1)
    reach: Optional[int] = Field(None, ge=0)
    engagement: Optional[int] = Field(None, ge=0)
    mentioned_at: datetime


class MentionResponse(BaseModel):
    id: int
    campaign_id: int
    platform: str
    content: str
    author: Optional[str]
    url: Optional[str]
    sentiment: Optional[float]
    reach: Optional[int]
    engagement: Optional[int]
    mentioned_at: datetime
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MentionListResponse(BaseModel):
    mentions: List[MentionResponse]


@router.post("", response_model=MentionResponse, status_code=status.HTTP_201_CREATED)
async def create(data: MentionCreate, session: SessionDep) -> Mention:
    """Record a mention for an existing campaign."""
    try:
        if await get_campaign_by_id(session, data.campaign_id) is None:
            raise NotFoundError("campaign not found")
        return await create_mention(session, **data.model_dump())
    except SQLAlchemyError as e:
        logger.error(
            f"Database error creating mention: {e}",
            extra={"campaign_id": data.campaign_id},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database error occurred while creating the mention",
        )


@router.get("", response_model=MentionListResponse)
async def list_all(
    session: SessionDep,
    campaign_id: Optional[int] = None,
    platform: Optional[str] = None,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
):
    """List mentions, most recent first."""
    try:
        mentions = await list_mentions(
            session, campaign_id=campaign_id, platform=platform,
            limit=limit, offset=offset,
        )
        return {"mentions": mentions}
    except SQLAlchemyError as e:
        logger.error(f"Database error listing mentions: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database error occurred while listing mentions",
        )
