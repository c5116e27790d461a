"""Database package for the war room application.

This package provides:
- Database models (Campaign, Mention, CrisisAlert, CrisisEvent)
- Asynchronous session management
- CRUD operations for all models
- FastAPI dependency injection support
"""

from warroom.app.db.base import Base
from warroom.app.db.models import Campaign, CrisisAlert, CrisisEvent, Mention
from warroom.app.db.async_session import (
    close_async_engine,
    get_async_engine,
    get_async_session,
    get_async_session_maker,
    get_db,
    init_async_db,
)
from warroom.app.db.dependencies import SessionDep

__all__ = [
    "Base",
    "Campaign",
    "CrisisAlert",
    "CrisisEvent",
    "Mention",
    "close_async_engine",
    "get_async_engine",
    "get_async_session",
    "get_async_session_maker",
    "get_db",
    "init_async_db",
    "SessionDep",
]
