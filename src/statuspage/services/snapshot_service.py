"""Public projection of a project - what anonymous visitors and replicas see."""

import copy
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from src.statuspage.core.security import (
    is_valid_domain_host,
    normalize_domain,
    normalize_domain_list,
    sanitize_disabled_tabs,
)
from src.statuspage.models.base import isoformat_z, parse_timestamp, utc_now
from src.statuspage.models.enums import ComponentStatus

# Most severe first; the first status present on any component wins.
_SEVERITY_ORDER = [
    ComponentStatus.MAJOR_OUTAGE,
    ComponentStatus.PARTIAL_OUTAGE,
    ComponentStatus.DEGRADED_PERFORMANCE,
    ComponentStatus.UNDER_MAINTENANCE,
]


def compute_overall_status(components: Any) -> str:
    statuses = {c.get("status") for c in components or [] if isinstance(c, Mapping)}
    for status in _SEVERITY_ORDER:
        if status.value in statuses:
            return status.value
    return ComponentStatus.OPERATIONAL.value


def public_domains(settings: Mapping[str, Any]) -> tuple[str, list[str]]:
    """Normalized, validated (primary, redirects) with the primary removed from redirects."""
    primary = normalize_domain(settings.get("customDomain") or "")
    if primary and not is_valid_domain_host(primary):
        primary = ""
    redirects = [
        host
        for host in normalize_domain_list(settings.get("redirectDomains") or [])
        if host != primary and is_valid_domain_host(host)
    ]
    return primary, redirects


def public_settings(settings: Mapping[str, Any]) -> dict[str, Any]:
    """Whitelist of settings that are safe to publish.

    Anything not listed here (support mailbox, DNS provider accounts, domain
    automation details, ...) stays in the admin record only.
    """
    primary, redirects = public_domains(settings)
    return {
        "pageTitle": settings.get("pageTitle") or "",
        "pageName": settings.get("pageName") or "",
        "organizationLegalName": settings.get("organizationLegalName") or "",
        "companyName": settings.get("companyName") or "",
        "companyUrl": settings.get("companyUrl") or "",
        "supportUrl": settings.get("supportUrl") or "",
        "privacyPolicyUrl": settings.get("privacyPolicyUrl") or "",
        "notificationFromName": settings.get("notificationFromName") or "",
        "notificationFromEmail": settings.get("notificationFromEmail") or "",
        "notificationReplyToEmail": settings.get("notificationReplyToEmail") or "",
        "notificationFooterMessage": settings.get("notificationFooterMessage") or "",
        "notificationLogoUrl": settings.get("notificationLogoUrl") or "",
        "notificationUseStatusLogo": settings.get("notificationUseStatusLogo") is not False,
        "defaultSmsCountryCode": settings.get("defaultSmsCountryCode") or "+1",
        "timezone": settings.get("timezone") or "UTC",
        "googleAnalyticsTrackingId": settings.get("googleAnalyticsTrackingId") or "",
        "hideFromSearchEngines": bool(settings.get("hideFromSearchEngines")),
        "brandColor": settings.get("brandColor") or "#0052cc",
        "aboutText": settings.get("aboutText") or "",
        "componentsView": settings.get("componentsView") or "list",
        "showUptime": settings.get("showUptime") is not False,
        "disabledTabs": sanitize_disabled_tabs(settings.get("disabledTabs") or {}),
        "customDomain": primary,
        "redirectDomains": redirects,
        "displayMode": settings.get("displayMode") or "single",
        "secondaryProjectId": settings.get("secondaryProjectId") or None,
        "tertiaryProjectId": settings.get("tertiaryProjectId") or None,
        "statusPageLogoUrl": settings.get("statusPageLogoUrl") or "",
    }


def _number(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, int | float):
        return float(value)
    return 0.0


def _records(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [copy.deepcopy(dict(item)) for item in value if isinstance(item, Mapping)]


class SnapshotProjector:
    """Builds the sanitized, public-readable snapshot of a project."""

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self.clock = clock

    def project(self, tenant: Mapping[str, Any]) -> dict[str, Any]:
        settings = tenant.get("settings")
        settings = public_settings(settings if isinstance(settings, Mapping) else {})

        components = sorted(
            _records(tenant.get("components")),
            key=lambda c: (_number(c.get("order")), _number(c.get("id"))),
        )
        incidents = sorted(
            _records(tenant.get("incidents")),
            key=lambda i: parse_timestamp(i.get("createdAt")),
            reverse=True,
        )
        maintenances = sorted(
            _records(tenant.get("scheduledMaintenances")),
            key=lambda m: parse_timestamp(m.get("scheduledStart")),
        )
        uptime = tenant.get("uptimeData")

        return {
            "id": tenant.get("id"),
            "name": tenant.get("name") or "",
            "slug": tenant.get("slug") or "",
            "customDomain": settings["customDomain"],
            "redirectDomains": settings["redirectDomains"],
            "settings": settings,
            "components": components,
            "incidents": incidents,
            "scheduledMaintenances": maintenances,
            "uptimeData": copy.deepcopy(dict(uptime)) if isinstance(uptime, Mapping) else {},
            "overallStatus": compute_overall_status(components),
            "updatedAt": isoformat_z(self.clock()),
        }
