"""Settings write path for custom and redirect domains."""

from collections.abc import Mapping
from typing import Any

from src.statuspage.core.exceptions import DomainConflictError, InvalidDomainError
from src.statuspage.core.logging import get_logger
from src.statuspage.core.security import (
    is_valid_domain_host,
    normalize_domain,
    split_domain_input,
)
from src.statuspage.repositories.local_store import LocalStore
from src.statuspage.services.audit_service import AuditService
from src.statuspage.services.tenant_resolver import TenantResolver, project_domain_config

logger = get_logger(__name__)


def _validated(raw: str) -> str:
    host = normalize_domain(raw)
    if not host or not is_valid_domain_host(host):
        raise InvalidDomainError(raw)
    return host


class DomainSettingsService:
    """Updates a project's domains while keeping hostnames unique across projects."""

    def __init__(self, store: LocalStore, resolver: TenantResolver, audit: AuditService):
        self.store = store
        self.resolver = resolver
        self.audit = audit

    def update_domains(
        self,
        project: dict[str, Any],
        custom_domain: str | None = None,
        redirect_domains: list[str] | str | None = None,
        user: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Validate and apply domain changes, then save and audit.

        ``None`` leaves a field untouched; an empty value clears it.

        Raises:
            InvalidDomainError: A supplied hostname is not valid.
            DomainConflictError: A hostname belongs to another project.
        """
        current = project_domain_config(project)
        fields: list[str] = []

        primary = current.primary
        if custom_domain is not None:
            primary = _validated(custom_domain) if custom_domain.strip() else ""
            fields.append("customDomain")

        redirects = current.redirects
        if redirect_domains is not None:
            redirects = []
            for raw in split_domain_input(redirect_domains):
                host = _validated(raw)
                if host not in redirects:
                    redirects.append(host)
            fields.append("redirectDomains")
        redirects = [host for host in redirects if host != primary]

        if not fields:
            return project["settings"]

        for host in ([primary] if primary else []) + redirects:
            owner = self.resolver.check_domain_conflict(host, exclude_project_id=project.get("id"))
            if owner is not None:
                logger.info(
                    "Rejected domain already owned by another project",
                    domain=host,
                    project_id=project.get("id"),
                    owner_project_id=owner.get("id"),
                )
                raise DomainConflictError(host, owner)

        settings = project.setdefault("settings", {})
        settings["customDomain"] = primary
        settings["redirectDomains"] = redirects
        self.store.save()
        self.audit.log_action(
            user, "settings.update", {"projectId": project.get("id"), "fields": fields}
        )
        logger.info("Updated project domains", project_id=project.get("id"), fields=fields)
        return settings
