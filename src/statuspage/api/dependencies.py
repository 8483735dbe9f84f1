"""FastAPI dependency injection definitions."""

import secrets
from typing import Annotated, Any

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyHeader

from src.statuspage.bootstrap import Runtime
from src.statuspage.services.tenant_resolver import TenantResolver

admin_key_header = APIKeyHeader(name="X-Admin-Key", auto_error=False)


def get_runtime(request: Request) -> Runtime:
    """The core services, built during application startup."""
    runtime: Runtime | None = getattr(request.app.state, "runtime", None)
    if runtime is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service is starting",
        )
    return runtime


RuntimeDep = Annotated[Runtime, Depends(get_runtime)]


def get_resolver(runtime: RuntimeDep) -> TenantResolver:
    return runtime.resolver


ResolverDep = Annotated[TenantResolver, Depends(get_resolver)]


def get_project(project_id: int, resolver: ResolverDep) -> dict[str, Any]:
    """Project from the ``project_id`` path parameter (404 if unknown)."""
    return resolver.resolve_by_id(project_id)


ProjectDep = Annotated[dict[str, Any], Depends(get_project)]


async def verify_admin_key(
    runtime: RuntimeDep,
    api_key: Annotated[str | None, Depends(admin_key_header)],
) -> None:
    """Require X-Admin-Key when ADMIN_API_KEY is configured."""
    expected = runtime.settings.admin_api_key
    if expected is None:
        return
    if api_key is None or not secrets.compare_digest(api_key, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing admin API key",
        )
