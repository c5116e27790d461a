"""API endpoints package for the war room application."""

from warroom.app.api.alerts import router as alerts_router
from warroom.app.api.campaigns import router as campaigns_router
from warroom.app.api.crisis import router as crisis_router
from warroom.app.api.listening import router as listening_router
from warroom.app.api.mentions import router as mentions_router

__all__ = [
    "alerts_router",
    "campaigns_router",
    "crisis_router",
    "listening_router",
    "mentions_router",
]
