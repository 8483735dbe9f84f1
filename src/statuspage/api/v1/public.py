"""Public, unauthenticated snapshot endpoints."""

from typing import Any

from fastapi import APIRouter, HTTPException, Request, status

from src.statuspage.api.dependencies import RuntimeDep
from src.statuspage.core.logging import bind_project_context

router = APIRouter(prefix="/public", tags=["public"])


@router.get("/current", responses={404: {"description": "Host does not belong to a project"}})
async def get_current_project(request: Request, runtime: RuntimeDep) -> dict[str, Any]:
    """Public snapshot of the project whose custom or redirect domain served this request."""
    project = getattr(request.state, "host_project", None)
    if project is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No project is configured for this host",
        )
    return runtime.projector.project(project)


@router.get("/projects/{slug}", responses={404: {"description": "Project not found"}})
async def get_project_snapshot(slug: str, runtime: RuntimeDep) -> dict[str, Any]:
    """Public snapshot of a project by slug."""
    project = runtime.resolver.resolve_by_slug(slug)
    bind_project_context(project.get("id"), slug)
    return runtime.projector.project(project)
