"""Host-based tenant resolution.

A request whose Host is a project's redirect domain is sent to the project's
primary domain with the same raw path and query. Every matched host attaches
the project to ``request.state.host_project``; OPTIONS requests are never
redirected.
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response

from src.statuspage.core.logging import bind_project_context, get_logger
from src.statuspage.services.tenant_resolver import build_redirect_url, request_scheme

logger = get_logger(__name__)


def original_path(request: Request) -> str:
    """Path exactly as the client sent it, percent-encoding intact."""
    raw_path = request.scope.get("raw_path")
    if not raw_path:
        return request.url.path
    return raw_path.split(b"?", 1)[0].decode("latin-1")


class HostResolverMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request.state.host_project = None
        runtime = getattr(request.app.state, "runtime", None)
        if runtime is None:
            return await call_next(request)

        match = runtime.resolver.resolve_by_host(request.headers.get("host"))
        if match is None:
            return await call_next(request)

        request.state.host_project = match.project
        if match.redirect and request.method != "OPTIONS":
            scheme = request_scheme(
                request.headers.get("x-forwarded-proto"), request.url.scheme, match.host
            )
            location = build_redirect_url(
                scheme,
                match.target_domain,
                original_path(request),
                request.scope.get("query_string", b"").decode("latin-1"),
            )
            logger.debug("Redirecting to primary domain", host=match.host, location=location)
            return RedirectResponse(location, status_code=308)

        bind_project_context(match.project.get("id"), match.project.get("slug"))
        return await call_next(request)
