from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from warroom.app.api.alerts import router as alerts_router
from warroom.app.api.campaigns import router as campaigns_router
from warroom.app.api.crisis import router as crisis_router
from warroom.app.api.listening import router as listening_router
from warroom.app.api.mentions import router as mentions_router
from warroom.app.core.cache import get_cache
from warroom.app.core.config import settings
from warroom.app.core.http_client import init_http_client
from warroom.app.core.logging import get_logger, setup_logging
from warroom.app.core.periodic import PeriodicTask
from warroom.app.db.async_session import close_async_engine, init_async_db, ping_database
from warroom.app.exceptions import RateLimitExceeded, WarRoomException
from warroom.app.middleware.rate_limit import (
    RateLimitMiddleware,
    get_api_limiter,
    get_outbound_limiter,
)
from warroom.app.middleware.request_id import RequestIdMiddleware
from warroom.app.providers.mentionlytics import get_mentionlytics_client


def create_sweeps() -> list[PeriodicTask]:
    """Background maintenance owned by the application lifespan."""
    return [
        PeriodicTask(
            "cache-cleanup", get_cache().cleanup, settings.cache_sweep_interval
        ),
        PeriodicTask(
            "outbound-rate-limit-cleanup",
            get_outbound_limiter().cleanup,
            settings.rate_limit_sweep_interval,
        ),
        PeriodicTask(
            "api-rate-limit-cleanup",
            get_api_limiter().cleanup,
            settings.rate_limit_sweep_interval,
        ),
    ]


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    setup_logging()
    logger = get_logger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[dict, None]:
        """Initialize the HTTP pool, database and sweeps; tear them down on exit."""
        async with init_http_client() as http_client:
            await init_async_db()

            sweeps = create_sweeps()
            for sweep in sweeps:
                await sweep.start()

            logger.info(
                "Application startup complete",
                extra={
                    "mentionlytics_configured": get_mentionlytics_client().is_configured(),
                    "debug_mode": settings.debug,
                },
            )

            try:
                yield {"http_client": http_client}
            finally:
                for sweep in sweeps:
                    await sweep.stop()

        await close_async_engine()
        logger.info("Application shutdown complete")

    app = FastAPI(
        title="WarRoom API",
        description="Campaign monitoring backend with social listening and crisis detection",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Middleware (last added = first executed)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
        max_age=600,
    )
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(campaigns_router)
    app.include_router(mentions_router)
    app.include_router(alerts_router)
    app.include_router(crisis_router)
    app.include_router(listening_router)

    @app.get("/health")
    async def health() -> dict[str, Any]:
        """Database reachability, cache statistics and rate limiter load."""
        health_status: dict[str, Any] = {"status": "ok", "components": {}}

        if await ping_database():
            health_status["components"]["database"] = {"status": "ok"}
        else:
            health_status["status"] = "degraded"
            health_status["components"]["database"] = {"status": "error"}

        health_status["components"]["cache"] = {
            "status": "ok",
            **get_cache().get_stats(),
        }
        health_status["components"]["rate_limiter"] = {
            "status": "ok",
            "outbound_records": len(get_outbound_limiter()),
            "api_records": len(get_api_limiter()),
        }
        health_status["components"]["mentionlytics"] = {
            "status": "ok",
            "configured": get_mentionlytics_client().is_configured(),
        }
        return health_status

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
        """Handle RateLimitExceeded and return HTTP 429 with Retry-After."""
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.error_code,
                "message": exc.message,
                "retry_after": exc.retry_after,
            },
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(WarRoomException)
    async def warroom_exception_handler(request: Request, exc: WarRoomException) -> JSONResponse:
        """Map application exceptions to their HTTP status."""
        if exc.status_code >= 500:
            logger.error(
                f"{type(exc).__name__}: {exc.message}",
                extra={"request_id": getattr(request.state, "request_id", None)},
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.error_code, "message": exc.message},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global handler for unhandled exceptions.

        Full details are logged server-side; the client only sees the
        exception message in debug mode, never a traceback.
        """
        request_id = getattr(request.state, "request_id", "unknown")

        logger.exception(
            f"Unhandled exception [request_id={request_id}]",
            extra={
                "request_id": request_id,
                "exception_type": type(exc).__name__,
                "exception_message": str(exc),
            },
        )

        if settings.debug:
            return JSONResponse(
                status_code=500,
                content={
                    "error": "internal_error",
                    "message": str(exc),
                    "exception_type": type(exc).__name__,
                    "request_id": request_id,
                },
            )

        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_error",
                "message": "Internal server error",
                "request_id": request_id,
            },
        )

    return app


# Create the application instance
app = create_app()
