"""Application middlewares."""

from asgi_correlation_id import CorrelationIdMiddleware, correlation_id
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import RequestResponseEndpoint

from src.statuspage.core.config import Settings
from src.statuspage.core.logging import bind_request_context, clear_request_context

from .host_resolver import HostResolverMiddleware

__all__ = [
    "setup_middlewares",
    "HostResolverMiddleware",
]


def setup_middlewares(app: FastAPI, settings: Settings) -> None:
    """Configure all application middlewares.

    Middleware order matters - the last one added is the outermost.
    """
    # Host resolution - innermost, so project context lands on top of request context
    app.add_middleware(HostResolverMiddleware)

    @app.middleware("http")
    async def request_log_context(
        request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        """Fresh structlog context per request, keyed by the correlation id."""
        clear_request_context()
        bind_request_context(correlation_id.get())
        try:
            return await call_next(request)
        finally:
            clear_request_context()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["Content-Type", "X-Admin-Key", "X-Request-ID"],
    )

    # Correlation ID - generates/propagates X-Request-ID, outermost
    app.add_middleware(CorrelationIdMiddleware)
