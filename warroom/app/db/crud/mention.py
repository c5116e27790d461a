"""Mention CRUD operations."""
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from warroom.app.db.models import Mention


async def create_mention(
    session: AsyncSession,
    campaign_id: int,
    platform: str,
    content: str,
    mentioned_at: datetime,
    author: Optional[str] = None,
    url: Optional[str] = None,
    sentiment: Optional[float] = None,
    reach: Optional[int] = None,
    engagement: Optional[int] = None,
    auto_commit: bool = True
) -> Mention:
    """Store a mention collected for a campaign.

    Args:
        session: Database session
        campaign_id: Owning campaign
        platform: Source platform (twitter, facebook, ...)
        content: Mention text
        mentioned_at: When the mention was published
        author: Optional author handle
        url: Optional link to the original post
        sentiment: Optional score from -1 (negative) to 1 (positive)
        reach: Optional audience size
        engagement: Optional interaction count
        auto_commit: Whether to commit the transaction
    """
    mention = Mention(
        campaign_id=campaign_id,
        platform=platform,
        content=content,
        author=author,
        url=url,
        sentiment=sentiment,
        reach=reach,
        engagement=engagement,
        mentioned_at=mentioned_at,
    )
    session.add(mention)
    if auto_commit:
        await session.commit()
    else:
        await session.flush()
    await session.refresh(mention)
    return mention


async def list_mentions(
    session: AsyncSession,
    campaign_id: Optional[int] = None,
    platform: Optional[str] = None,
    limit: int = 50,
    offset: int = 0
) -> List[Mention]:
    """List mentions ordered by ``mentioned_at``, newest first."""
    query = select(Mention)
    if campaign_id is not None:
        query = query.where(Mention.campaign_id == campaign_id)
    if platform is not None:
        query = query.where(Mention.platform == platform)
    query = query.order_by(Mention.mentioned_at.desc(), Mention.id.desc())
    query = query.limit(limit).offset(offset)

    result = await session.execute(query)
    return list(result.scalars().all())
