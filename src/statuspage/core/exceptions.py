"""Domain exceptions and the handlers that render them with request_id."""

from typing import Any

from asgi_correlation_id import correlation_id
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.statuspage.core.logging import get_logger

logger = get_logger(__name__)


class StatusPageError(Exception):
    """Base class for errors raised by the status page core."""


class ProjectNotFoundError(StatusPageError):
    """No project matches the given slug, id or host."""

    def __init__(self, key: Any):
        self.key = key
        super().__init__(f"Project '{key}' not found")


class InvalidDomainError(StatusPageError):
    """A hostname failed normalization or validation."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Invalid domain: '{value}'")


class DomainConflictError(StatusPageError):
    """A hostname is already claimed by another project."""

    def __init__(self, domain: str, project: dict[str, Any]):
        self.domain = domain
        self.project = project
        name = project.get("name") or project.get("slug") or project.get("id")
        super().__init__(f"Domain '{domain}' is already used by project '{name}'")


class NoDomainsConfiguredError(StatusPageError):
    """A DNS check was requested for a project without any domains."""

    def __init__(self, project_id: Any):
        self.project_id = project_id
        super().__init__("No domains configured for this project")


class MalformedLocalFileError(StatusPageError):
    """The local data file could not be parsed into a dataset."""


class RemoteUnavailableError(StatusPageError):
    """The remote document store could not be reached or read."""


def _error_response(status_code: int, detail: str, **extra: Any) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "request_id": correlation_id.get(), **extra},
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Configure exception handlers that include request_id in responses."""

    @app.exception_handler(StarletteHTTPException)
    async def starlette_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return _error_response(exc.status_code, exc.detail)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return _error_response(exc.status_code, exc.detail)

    @app.exception_handler(ProjectNotFoundError)
    async def project_not_found_handler(
        request: Request, exc: ProjectNotFoundError
    ) -> JSONResponse:
        return _error_response(status.HTTP_404_NOT_FOUND, str(exc))

    @app.exception_handler(InvalidDomainError)
    async def invalid_domain_handler(request: Request, exc: InvalidDomainError) -> JSONResponse:
        return _error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, str(exc))

    @app.exception_handler(NoDomainsConfiguredError)
    async def no_domains_handler(request: Request, exc: NoDomainsConfiguredError) -> JSONResponse:
        return _error_response(status.HTTP_400_BAD_REQUEST, str(exc))

    @app.exception_handler(DomainConflictError)
    async def domain_conflict_handler(request: Request, exc: DomainConflictError) -> JSONResponse:
        return _error_response(
            status.HTTP_409_CONFLICT,
            str(exc),
            domain=exc.domain,
            conflict_project_id=exc.project.get("id"),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        request_id = correlation_id.get()
        logger.exception(
            "Unhandled exception",
            exc_info=exc,
            request_id=request_id,
            path=request.url.path,
        )
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
