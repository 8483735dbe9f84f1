"""Administrative endpoints for project domains, their DNS checks and the audit trail."""

from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from src.statuspage.api.dependencies import ProjectDep, ResolverDep, RuntimeDep, verify_admin_key
from src.statuspage.core.security import normalize_domain
from src.statuspage.schemas.audit import AuditEntryRead
from src.statuspage.schemas.project import (
    DnsCheckRead,
    DomainCheckResponse,
    DomainConfigRead,
    DomainInstructions,
    DomainSettingsRead,
    DomainSettingsUpdate,
    DomainValidateRequest,
    DomainValidationRead,
)
from src.statuspage.services.audit_service import summarize_action
from src.statuspage.services.tenant_resolver import project_domain_config

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(verify_admin_key)])


def _domain_settings(project: dict) -> DomainSettingsRead:
    config = project_domain_config(project)
    return DomainSettingsRead(
        project_id=project["id"],
        slug=project.get("slug") or "",
        custom_domain=config.primary,
        redirect_domains=config.redirects,
    )


@router.get("/projects/{project_id}/domains", response_model=DomainSettingsRead)
async def get_domains(project: ProjectDep) -> DomainSettingsRead:
    return _domain_settings(project)


@router.put(
    "/projects/{project_id}/domains",
    response_model=DomainSettingsRead,
    responses={
        409: {"description": "A domain is already used by another project"},
        422: {"description": "A domain is not a valid hostname"},
    },
)
async def update_domains(
    body: DomainSettingsUpdate,
    project: ProjectDep,
    runtime: RuntimeDep,
) -> DomainSettingsRead:
    """Change the primary and/or redirect domains of a project.

    Every hostname is checked against all other projects' primary and
    redirect domains.
    """
    runtime.domain_settings.update_domains(
        project,
        custom_domain=body.custom_domain,
        redirect_domains=body.redirect_domains,
    )
    return _domain_settings(project)


@router.get("/projects/{project_id}/domains/config", response_model=DomainConfigRead)
async def get_domain_config(
    project: ProjectDep, runtime: RuntimeDep, request: Request
) -> DomainConfigRead:
    """Configured domains plus the DNS target they should point at."""
    config = project_domain_config(project)
    target = runtime.domain_validation.expected_target(request.headers.get("host"))
    if target:
        primary = f"Set CNAME {config.primary or '<custom-domain>'} -> {target}"
    else:
        primary = "Set CUSTOM_DOMAIN_TARGET to show the expected CNAME target."
    if config.primary:
        redirect = f"Point redirect domains to {config.primary} (or to the same app target)."
    else:
        redirect = "Set a primary custom domain first."
    return DomainConfigRead(
        project_id=project["id"],
        custom_domain=config.primary,
        redirect_domains=config.redirects,
        expected_target=target,
        instructions=DomainInstructions(primary=primary, redirect=redirect),
    )


@router.post(
    "/projects/{project_id}/domains/validate",
    response_model=DomainValidationRead,
    responses={
        400: {"description": "The project has no domains to check"},
        422: {"description": "The requested domain is not a valid hostname"},
    },
)
async def validate_domains(
    project: ProjectDep,
    runtime: RuntimeDep,
    request: Request,
    body: DomainValidateRequest | None = None,
) -> DomainValidationRead:
    """Resolve DNS for one domain, or for every domain of the project."""
    report = await runtime.domain_validation.validate_project(
        project,
        host_header=request.headers.get("host"),
        domain=body.domain if body else None,
    )
    return DomainValidationRead(
        project_id=report.project_id,
        expected_target=report.expected_target,
        validated_at=report.validated_at,
        all_ok=report.all_ok,
        results=[DnsCheckRead(**asdict(result)) for result in report.results],
    )


@router.get("/domains/check", response_model=DomainCheckResponse)
async def check_domain(
    domain: str,
    resolver: ResolverDep,
    exclude_project_id: int | None = None,
) -> DomainCheckResponse:
    normalized = normalize_domain(domain)
    owner = resolver.check_domain_conflict(normalized, exclude_project_id=exclude_project_id)
    return DomainCheckResponse(
        domain=normalized,
        available=owner is None,
        conflict_project_id=owner.get("id") if owner else None,
        conflict_project_name=owner.get("name") if owner else None,
    )


@router.get("/audit", response_model=list[AuditEntryRead])
async def list_audit_entries(
    runtime: RuntimeDep,
    limit: Annotated[int, Query(ge=1, le=500)] = 50,
) -> list[AuditEntryRead]:
    """Most recent audit entries first."""
    return [
        AuditEntryRead(
            at=entry.get("at") or "",
            user=entry.get("user"),
            action=entry.get("action") or "",
            meta=entry.get("meta") or {},
            summary=summarize_action(entry.get("action") or "", entry.get("meta")),
        )
        for entry in runtime.audit.read_entries(limit)
    ]
