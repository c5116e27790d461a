"""Services package for the war room application.

This package provides:
- Social-listening proxy logic with cache and mock fallback
- Rule-based crisis detection over stored mentions
"""

from warroom.app.services.crisis_detection import CrisisDetectionEngine, crisis_engine
from warroom.app.services.listening import (
    ListeningResult,
    ListeningService,
    get_listening_service,
    reset_listening_service,
)

__all__ = [
    "CrisisDetectionEngine",
    "crisis_engine",
    "ListeningResult",
    "ListeningService",
    "get_listening_service",
    "reset_listening_service",
]
