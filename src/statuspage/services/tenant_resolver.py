"""Tenant lookup by slug or hostname, and cross-tenant domain uniqueness."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from src.statuspage.core.exceptions import ProjectNotFoundError
from src.statuspage.core.security import normalize_domain, normalize_domain_list
from src.statuspage.repositories.local_store import LocalStore

LOCAL_HOSTS = frozenset({"localhost", "127.0.0.1"})


@dataclass(frozen=True)
class DomainConfig:
    primary: str
    redirects: list[str]

    @property
    def all(self) -> list[str]:
        return ([self.primary] if self.primary else []) + self.redirects


@dataclass(frozen=True)
class HostMatch:
    """A project matched by Host header.

    ``redirect`` is True when the host is a redirect domain and the project
    has a distinct primary domain to send the visitor to.
    """

    project: dict[str, Any]
    host: str
    redirect: bool
    target_domain: str


def project_domain_config(project: Mapping[str, Any]) -> DomainConfig:
    settings = project.get("settings")
    settings = settings if isinstance(settings, Mapping) else {}
    primary = normalize_domain(settings.get("customDomain") or "")
    redirects = [
        host for host in normalize_domain_list(settings.get("redirectDomains") or []) if host != primary
    ]
    return DomainConfig(primary=primary, redirects=redirects)


def request_scheme(forwarded_proto: str | None, scheme: str | None, host: str) -> str:
    """Scheme to use for a redirect: proxy header, then the request, then a host-based guess."""
    forwarded = (forwarded_proto or "").split(",")[0].strip()
    if forwarded:
        return forwarded
    if scheme:
        return scheme
    return "http" if normalize_domain(host) in LOCAL_HOSTS else "https"


def build_redirect_url(scheme: str, target_domain: str, path: str, query: str = "") -> str:
    """Same path and query string on the target domain."""
    url = f"{scheme}://{target_domain}{path or '/'}"
    if query:
        url = f"{url}?{query}"
    return url


class TenantResolver:
    """Read-side lookups over the projects held by the LocalStore."""

    def __init__(self, store: LocalStore):
        self.store = store

    def resolve_by_slug(self, slug: str) -> dict[str, Any]:
        project = self.store.get_project_by_slug(slug)
        if project is None:
            raise ProjectNotFoundError(slug)
        return project

    def resolve_by_id(self, project_id: int | str) -> dict[str, Any]:
        project = self.store.get_project_by_id(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project

    def resolve_by_host(self, host: str | None) -> HostMatch | None:
        """Match a Host header against primary domains first, then redirect domains."""
        normalized = normalize_domain(host or "")
        if not normalized:
            return None

        configs = [(p, project_domain_config(p)) for p in self.store.projects]
        for project, config in configs:
            if config.primary and config.primary == normalized:
                return HostMatch(project, normalized, redirect=False, target_domain=config.primary)
        for project, config in configs:
            if normalized in config.redirects:
                return HostMatch(
                    project,
                    normalized,
                    redirect=bool(config.primary),
                    target_domain=config.primary,
                )
        return None

    def check_domain_conflict(
        self, candidate: str, exclude_project_id: int | None = None
    ) -> dict[str, Any] | None:
        """Return the other project that already claims ``candidate``, if any.

        Checks primary and redirect domains of every project except
        ``exclude_project_id``. Must run on every settings write touching
        domains, not only on project creation.
        """
        normalized = normalize_domain(candidate)
        if not normalized:
            return None
        for project in self.store.projects:
            if exclude_project_id is not None and project.get("id") == exclude_project_id:
                continue
            if normalized in project_domain_config(project).all:
                return project
        return None
