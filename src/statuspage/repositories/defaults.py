"""Built-in dataset used when no (readable) local data file exists."""

from typing import Any

from src.statuspage.models.base import utc_now_iso

DEFAULT_BRAND_COLOR = "#0052cc"
DEFAULT_SUPPORT_EMAIL = "support@example.com"
DEFAULT_ABOUT_TEXT = (
    "Welcome to the status page. Here you can find live updates and incident history."
)
DEFAULT_NEXT_ID = 4000


def footer_message(page_name: str) -> str:
    return (
        "You received this email because you are subscribed to "
        f"{page_name} status notifications."
    )


def default_settings(name: str, created_at: str | None = None) -> dict[str, Any]:
    return {
        "pageTitle": f"{name} Status",
        "pageName": f"{name} Status",
        "organizationLegalName": name,
        "companyName": name,
        "companyUrl": "",
        "supportUrl": "",
        "privacyPolicyUrl": "",
        "supportEmail": DEFAULT_SUPPORT_EMAIL,
        "notificationFromName": name,
        "notificationFromEmail": DEFAULT_SUPPORT_EMAIL,
        "notificationReplyToEmail": DEFAULT_SUPPORT_EMAIL,
        "notificationFooterMessage": footer_message(name),
        "notificationLogoUrl": "",
        "notificationUseStatusLogo": True,
        "statusPageLogoUrl": "",
        "adminPanelLogoUrl": "",
        "displayMode": "single",
        "secondaryProjectId": None,
        "tertiaryProjectId": None,
        "defaultSmsCountryCode": "+1",
        "timezone": "UTC",
        "googleAnalyticsTrackingId": "",
        "hideFromSearchEngines": False,
        "brandColor": DEFAULT_BRAND_COLOR,
        "aboutText": DEFAULT_ABOUT_TEXT,
        "componentsView": "list",
        "showUptime": True,
        "disabledTabs": {},
        "customDomain": "",
        "redirectDomains": [],
        "domainAutomationProvider": "firebase_hosting",
        "domainRegistrar": "",
        "dnsProvider": "",
        "domainContactEmail": "",
        "dnsProviderAccountId": "",
        "dnsProviderZone": "",
        "createdAt": created_at or utc_now_iso(),
    }


def _component(
    id: int, name: str, description: str, order: int, created_at: str, parent_id: int | None = None
) -> dict[str, Any]:
    return {
        "id": id,
        "parentId": parent_id,
        "name": name,
        "description": description,
        "status": "operational",
        "order": order,
        "showUptime": True,
        "view": "list",
        "createdAt": created_at,
    }


def _incident_templates(base: int, created_at: str) -> list[dict[str, Any]]:
    rows = [
        (
            "Service Outage",
            "Service Outage - [Region/Component]",
            "investigating",
            "major",
            "We are currently investigating reports of service disruption. "
            "We will provide an update within 30 minutes.",
        ),
        (
            "Degraded Performance",
            "Degraded Performance - [Region/Component]",
            "investigating",
            "minor",
            "We are aware of degraded performance affecting some users "
            "and are working to restore normal service levels.",
        ),
        (
            "Partial Outage",
            "Partial Outage - [Region/Component]",
            "investigating",
            "major",
            "A partial service outage has been detected affecting a subset of users. "
            "Mitigation is in progress.",
        ),
        (
            "Third-Party Provider Issue",
            "Third-Party Provider Disruption - [Provider Name]",
            "identified",
            "minor",
            "A third-party provider is experiencing issues that may impact our service. "
            "We are monitoring the situation closely.",
        ),
    ]
    return [
        {
            "id": base + offset,
            "name": name,
            "title": title,
            "status": status,
            "impact": impact,
            "message": message,
            "affectedComponents": [],
            "createdAt": created_at,
        }
        for offset, (name, title, status, impact, message) in enumerate(rows)
    ]


def _maintenance_templates(base: int, created_at: str) -> list[dict[str, Any]]:
    rows = [
        (
            "Scheduled Upgrade",
            "Scheduled Upgrade - [Version] [Region]",
            "A scheduled upgrade will be performed during the maintenance window.",
            180,
        ),
        (
            "Infrastructure Maintenance",
            "Infrastructure Maintenance - [Description]",
            "Routine infrastructure maintenance is scheduled.",
            120,
        ),
        (
            "Database Maintenance",
            "Database Maintenance Window",
            "Scheduled database maintenance will be performed.",
            60,
        ),
    ]
    return [
        {
            "id": base + offset,
            "name": name,
            "title": title,
            "message": message,
            "defaultDurationMinutes": minutes,
            "affectedComponents": [],
            "createdAt": created_at,
        }
        for offset, (name, title, message, minutes) in enumerate(rows)
    ]


def default_project(id: int, name: str, slug: str) -> dict[str, Any]:
    """A new project with region components and the standard templates.

    Nested record ids are derived from the project id (``id * 1000 + n``) so
    they never collide with ids issued by the global counter.
    """
    now = utc_now_iso()
    base = id * 1000
    return {
        "id": id,
        "name": name,
        "slug": slug,
        "settings": default_settings(name, now),
        "components": [
            _component(base + 10, "USA", "United States region", 0, now),
            _component(base + 11, "LIVE USA", "Live - USA", 0, now, parent_id=base + 10),
            _component(base + 12, "PREVIEW USA", "Preview - USA", 1, now, parent_id=base + 10),
            _component(base + 13, "CANADA", "Canada region", 1, now),
            _component(base + 16, "UK", "United Kingdom region", 2, now),
            _component(base + 19, "EUROPE", "Europe region", 3, now),
            _component(base + 20, "AUSTRALIA", "Australia region", 4, now),
        ],
        "incidents": [],
        "scheduledMaintenances": [],
        "incidentTemplates": _incident_templates(base + 100, now),
        "maintenanceTemplates": _maintenance_templates(base + 200, now),
        "subscribers": [],
        "uptimeData": {},
        "analytics": {
            "pageViewsByDay": {},
            "uniqueVisitorsByDay": {},
            "visitorHashesByDay": {},
            "updatedAt": now,
        },
        "createdAt": now,
    }


def default_data() -> dict[str, Any]:
    primary = default_project(1, "Default", "default")
    primary["settings"].update(
        {"displayMode": "triad", "secondaryProjectId": 2, "tertiaryProjectId": 3}
    )

    billing = default_project(2, "eBillingHub", "ebillinghub")
    billing["components"] = [
        _component(2010, "eBillingHub Components", "eBillingHub system", 0, billing["createdAt"])
    ]

    payments = default_project(3, "Payments", "payments")
    payments["components"] = [
        _component(3010, "Submission API", "Payment submission endpoint", 0, payments["createdAt"]),
        _component(
            3011,
            "Payment Gateway",
            "Payment processing gateway",
            0,
            payments["createdAt"],
            parent_id=3010,
        ),
    ]

    return {
        "users": [],
        "projects": [primary, billing, payments],
        "nextId": DEFAULT_NEXT_ID,
        "securityMigrations": {},
    }
