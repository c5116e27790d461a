"""Campaign CRUD operations."""
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from warroom.app.db.models import Campaign


async def create_campaign(
    session: AsyncSession,
    name: str,
    start_date: datetime,
    description: Optional[str] = None,
    end_date: Optional[datetime] = None,
    budget: Optional[float] = None,
    auto_commit: bool = True
) -> Campaign:
    """Create a new campaign with status ``active``."""
    campaign = Campaign(
        name=name,
        description=description,
        start_date=start_date,
        end_date=end_date,
        budget=budget,
        status="active",
    )
    session.add(campaign)
    if auto_commit:
        await session.commit()
    else:
        await session.flush()
    await session.refresh(campaign)
    return campaign


async def get_campaign_by_id(
    session: AsyncSession,
    campaign_id: int
) -> Optional[Campaign]:
    result = await session.execute(
        select(Campaign).where(Campaign.id == campaign_id)
    )
    return result.scalar_one_or_none()


async def list_campaigns(
    session: AsyncSession,
    status: Optional[str] = None,
    limit: int = 50,
    offset: int = 0
) -> List[Campaign]:
    """List campaigns, newest first.

    Args:
        session: Database session
        status: Only campaigns with this status
        limit: Maximum number of rows
        offset: Rows to skip
    """
    query = select(Campaign)
    if status is not None:
        query = query.where(Campaign.status == status)
    query = query.order_by(Campaign.created_at.desc(), Campaign.id.desc())
    query = query.limit(limit).offset(offset)

    result = await session.execute(query)
    return list(result.scalars().all())


async def update_campaign(
    session: AsyncSession,
    campaign_id: int,
    auto_commit: bool = True,
    **kwargs
) -> Optional[Campaign]:
    """Apply a partial update.

    Returns:
        Updated Campaign if found, None otherwise
    """
    campaign = await get_campaign_by_id(session, campaign_id)
    if campaign is None:
        return None

    for key, value in kwargs.items():
        if hasattr(campaign, key):
            setattr(campaign, key, value)

    if auto_commit:
        await session.commit()
    else:
        await session.flush()
    await session.refresh(campaign)
    return campaign
