"""Database dependencies for FastAPI dependency injection.

Usage:
    from warroom.app.db.dependencies import SessionDep

    @router.get("/campaigns")
    async def list_campaigns(session: SessionDep):
        ...
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from warroom.app.db.async_session import get_db

SessionDep = Annotated[AsyncSession, Depends(get_db)]

__all__ = ["SessionDep"]
