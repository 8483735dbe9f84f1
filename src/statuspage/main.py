import secrets
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.security import APIKeyHeader
from prometheus_fastapi_instrumentator import Instrumentator

from src.statuspage.api.middlewares import setup_middlewares
from src.statuspage.api.v1.router import api_router
from src.statuspage.bootstrap import build_runtime, shutdown_runtime
from src.statuspage.core.config import get_settings
from src.statuspage.core.exceptions import setup_exception_handlers
from src.statuspage.core.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan - hydrate and load before serving, drain on shutdown."""
    settings = get_settings()
    setup_logging(settings.debug)
    logger.info(f"Starting {settings.app_name}")

    runtime = await build_runtime(settings)
    app.state.runtime = runtime
    logger.info(
        "Local store ready",
        projects=len(runtime.store.projects),
        replication=runtime.replication_enabled,
        hydration=runtime.hydration.value,
    )

    yield

    logger.info("Shutdown initiated", pending_sync_tasks=runtime.queue.pending_count)
    await shutdown_runtime(runtime, grace_period=settings.shutdown_grace_period)
    logger.info("Shutdown complete")


OPENAPI_TAGS = [
    {"name": "public", "description": "Public status page snapshots"},
    {"name": "admin", "description": "Domain settings and audit trail"},
]


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Multi-tenant status page API",
        version="0.1.0",
        openapi_tags=OPENAPI_TAGS,
        lifespan=lifespan,
    )

    setup_exception_handlers(app)
    setup_middlewares(app, settings)
    app.include_router(api_router)

    # Prometheus metrics instrumentation
    instrumentator = Instrumentator().instrument(app)

    # Protect /metrics endpoint if API key is configured
    if settings.metrics_api_key:
        api_key_header = APIKeyHeader(name="X-Metrics-Key", auto_error=False)

        async def verify_metrics_key(api_key: str | None = Depends(api_key_header)) -> None:
            if (
                api_key is None
                or settings.metrics_api_key is None
                or not secrets.compare_digest(api_key, settings.metrics_api_key)
            ):
                raise HTTPException(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    detail="Invalid or missing metrics API key",
                )

        instrumentator.expose(app, endpoint="/metrics", dependencies=[Depends(verify_metrics_key)])
    else:
        instrumentator.expose(app, endpoint="/metrics")

    @app.get("/health")
    async def health(request: Request) -> JSONResponse:
        """Local store state plus replication status.

        The remote store being unreachable is "degraded": requests are still
        served from the local files.
        """
        runtime = getattr(request.app.state, "runtime", None)
        if runtime is None:
            return JSONResponse(
                content={"status": "starting", "store": "not_loaded"},
                status_code=503,
            )

        health_status: dict[str, Any] = {
            "status": "healthy",
            "store": "loaded" if runtime.store.is_loaded else "not_loaded",
            "projects": len(runtime.store.projects) if runtime.store.is_loaded else 0,
            "replication": "enabled" if runtime.replication_enabled else "disabled",
            "hydration": runtime.hydration.value,
            "sync_queue": {
                "pending": runtime.queue.pending_count,
                "completed": runtime.queue.completed_count,
                "failed": runtime.queue.failed_count,
            },
        }
        if not runtime.store.is_loaded:
            health_status["status"] = "unhealthy"
        elif runtime.settings.replication_enabled and not runtime.replication_enabled:
            health_status["status"] = "degraded"

        status_code = 503 if health_status["status"] == "unhealthy" else 200
        return JSONResponse(content=health_status, status_code=status_code)

    return app


app = create_app()
