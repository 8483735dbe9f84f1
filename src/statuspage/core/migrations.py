"""Versioned migrations for the local dataset.

Each entry of ``MIGRATIONS`` upgrades a dataset from ``version`` to
``version + 1`` in place. Files without ``schemaVersion`` are version 0.
After the chain, ``normalize_dataset`` backfills defaults; it is idempotent
and runs on every load so hand-edited files are normalized as well.
"""

from collections.abc import Callable, Iterator, Mapping
from typing import Any

from src.statuspage.core.logging import get_logger
from src.statuspage.core.security import (
    is_valid_domain_host,
    make_slug,
    normalize_domain,
    normalize_domain_list,
    sanitize_disabled_tabs,
    validate_project_slug_format,
)
from src.statuspage.core.security.validators import MAX_PROJECT_SLUG_LENGTH
from src.statuspage.models.base import utc_now_iso
from src.statuspage.repositories.defaults import (
    DEFAULT_ABOUT_TEXT,
    DEFAULT_BRAND_COLOR,
    DEFAULT_SUPPORT_EMAIL,
    footer_message,
)

logger = get_logger(__name__)

CURRENT_SCHEMA_VERSION = 2
FALLBACK_NEXT_ID = 2000

ALLOWED_ROOT_KEYS = frozenset({"users", "projects", "nextId", "securityMigrations", "schemaVersion"})

# Keys of the single-tenant layout that predates projects.
LEGACY_PROJECT_KEYS = (
    "settings",
    "componentGroups",
    "components",
    "incidents",
    "scheduledMaintenances",
    "subscribers",
    "uptimeData",
)

Migration = Callable[[dict[str, Any]], None]


def _lift_flat_layout(data: dict[str, Any]) -> None:
    """v0 -> v1: move a single-tenant layout into ``projects[0]``."""
    projects = data.get("projects")
    if "components" in data and not projects:
        project: dict[str, Any] = {
            "id": 1,
            "name": "Default",
            "slug": "default",
            "settings": data.get("settings") or {},
            "componentGroups": data.get("componentGroups") or [],
            "components": data.get("components") or [],
            "incidents": data.get("incidents") or [],
            "scheduledMaintenances": data.get("scheduledMaintenances") or [],
            "subscribers": data.get("subscribers") or [],
            "uptimeData": data.get("uptimeData") or {},
            "createdAt": utc_now_iso(),
        }
        data["projects"] = [project]
        logger.info("Migrated legacy single-tenant data into project", slug="default")
    for key in LEGACY_PROJECT_KEYS:
        data.pop(key, None)


def _ensure_root_collections(data: dict[str, Any]) -> None:
    """v1 -> v2: required root collections and counters exist with the right types."""
    if not isinstance(data.get("projects"), list):
        data["projects"] = []
    if not isinstance(data.get("users"), list):
        data["users"] = []
    if not isinstance(data.get("securityMigrations"), dict):
        data["securityMigrations"] = {}
    next_id = data.get("nextId")
    if isinstance(next_id, bool) or not isinstance(next_id, int) or next_id <= 0:
        data["nextId"] = FALLBACK_NEXT_ID


MIGRATIONS: dict[int, Migration] = {
    0: _lift_flat_layout,
    1: _ensure_root_collections,
}


def detect_version(data: Mapping[str, Any]) -> int:
    version = data.get("schemaVersion")
    if isinstance(version, bool) or not isinstance(version, int) or version < 0:
        return 0
    return version


def run_migrations(data: dict[str, Any]) -> int:
    """Upgrade ``data`` in place to CURRENT_SCHEMA_VERSION and normalize it.

    Returns:
        The version the data was found at.
    """
    found = detect_version(data)
    version = found
    while version < CURRENT_SCHEMA_VERSION:
        MIGRATIONS[version](data)
        version += 1
    if found < CURRENT_SCHEMA_VERSION:
        logger.info("Migrated local dataset", from_version=found, to_version=version)
    elif found > CURRENT_SCHEMA_VERSION:
        logger.warning(
            "Local dataset is newer than this build",
            found_version=found,
            supported_version=CURRENT_SCHEMA_VERSION,
        )
    _ensure_root_collections(data)
    normalize_dataset(data)
    data["schemaVersion"] = max(found, CURRENT_SCHEMA_VERSION)
    return found


# --- Normalization ------------------------------------------------------------


def _missing(settings: Mapping[str, Any], key: str) -> bool:
    value = settings.get(key)
    return value is None or value == ""


def normalize_settings(project: dict[str, Any]) -> None:
    """Backfill absent or empty settings, never overwriting a value that is present."""
    settings = project.get("settings")
    if not isinstance(settings, dict):
        settings = project["settings"] = {}
    name = project.get("name") or ""

    def fill(key: str, value: Any) -> None:
        if _missing(settings, key):
            settings[key] = value

    fill("pageTitle", f"{name or 'Status'} Status")
    fill("pageName", settings["pageTitle"])
    fill("organizationLegalName", name)
    fill("companyName", name)
    fill("companyUrl", "")
    fill("supportUrl", "")
    fill("privacyPolicyUrl", "")
    fill("supportEmail", DEFAULT_SUPPORT_EMAIL)
    fill(
        "notificationFromName",
        settings["organizationLegalName"] or settings["companyName"] or name,
    )
    fill("notificationFromEmail", settings["supportEmail"] or DEFAULT_SUPPORT_EMAIL)
    fill("notificationReplyToEmail", settings["supportEmail"] or DEFAULT_SUPPORT_EMAIL)
    fill(
        "notificationFooterMessage",
        footer_message(settings["pageName"] or settings["pageTitle"] or name or "this service"),
    )
    fill("notificationLogoUrl", "")
    fill("statusPageLogoUrl", "")
    fill("displayMode", "single")
    fill("defaultSmsCountryCode", "+1")
    fill("timezone", "UTC")
    fill("googleAnalyticsTrackingId", "")
    fill("brandColor", DEFAULT_BRAND_COLOR)
    fill("aboutText", DEFAULT_ABOUT_TEXT)
    fill("componentsView", "list")
    settings.setdefault("secondaryProjectId", None)
    settings.setdefault("tertiaryProjectId", None)
    for key, default in (
        ("notificationUseStatusLogo", True),
        ("hideFromSearchEngines", False),
        ("showUptime", True),
    ):
        if not isinstance(settings.get(key), bool):
            settings[key] = default

    settings["disabledTabs"] = sanitize_disabled_tabs(settings.get("disabledTabs") or {})

    primary = normalize_domain(settings.get("customDomain") or "")
    if primary and not is_valid_domain_host(primary):
        logger.warning("Dropped invalid custom domain", project_id=project.get("id"))
        primary = ""
    settings["customDomain"] = primary
    settings["redirectDomains"] = [
        host
        for host in normalize_domain_list(settings.get("redirectDomains") or [])
        if host != primary and is_valid_domain_host(host)
    ]


def normalize_analytics(project: dict[str, Any]) -> None:
    analytics = project.get("analytics")
    if not isinstance(analytics, dict):
        analytics = project["analytics"] = {}
    for key in ("pageViewsByDay", "uniqueVisitorsByDay", "visitorHashesByDay"):
        if not isinstance(analytics.get(key), dict):
            analytics[key] = {}
    if not analytics.get("updatedAt"):
        analytics["updatedAt"] = utc_now_iso()


def normalize_components(project: dict[str, Any]) -> None:
    fallback_order = 0
    for component in project["components"]:
        if not isinstance(component, dict):
            continue
        component.setdefault("parentId", None)
        if not component.get("view"):
            component["view"] = "list"
        order = component.get("order")
        if isinstance(order, bool) or not isinstance(order, int | float):
            component["order"] = fallback_order
            fallback_order += 1


def normalize_project(project: dict[str, Any]) -> None:
    for key in (
        "components",
        "incidents",
        "scheduledMaintenances",
        "incidentTemplates",
        "maintenanceTemplates",
        "subscribers",
    ):
        if not isinstance(project.get(key), list):
            project[key] = []
    if not isinstance(project.get("uptimeData"), dict):
        project["uptimeData"] = {}
    normalize_settings(project)
    normalize_analytics(project)
    normalize_components(project)


def iter_issued_ids(data: Mapping[str, Any]) -> Iterator[int]:
    """Every integer id in the dataset: users, projects and their nested records."""

    def ids(records: Any) -> Iterator[int]:
        for record in records if isinstance(records, list) else []:
            if isinstance(record, Mapping):
                value = record.get("id")
                if isinstance(value, int) and not isinstance(value, bool):
                    yield value

    yield from ids(data.get("users"))
    yield from ids(data.get("projects"))
    for project in data.get("projects") or []:
        if not isinstance(project, Mapping):
            continue
        for key in (
            "components",
            "incidents",
            "scheduledMaintenances",
            "incidentTemplates",
            "maintenanceTemplates",
            "subscribers",
        ):
            yield from ids(project.get(key))


def _valid_slug(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    try:
        return validate_project_slug_format(value)
    except ValueError:
        return None


def normalize_slugs(projects: list[dict[str, Any]]) -> None:
    """Give every project a well-formed slug that no earlier project uses."""
    taken: set[str] = set()
    for project in projects:
        current = project.get("slug")
        slug = _valid_slug(current)
        if slug is None or slug in taken:
            # Leave room for a "-N" suffix within the length limit.
            base = make_slug(str(current or project.get("name") or ""))
            base = base[: MAX_PROJECT_SLUG_LENGTH - 8]
            base = base.strip("-") or make_slug(f"project-{project.get('id')}")
            slug = base
            suffix = 2
            while slug in taken:
                slug = f"{base}-{suffix}"
                suffix += 1
            logger.warning(
                "Repaired project slug",
                project_id=project.get("id"),
                previous_slug=current,
                slug=slug,
            )
            project["slug"] = slug
        taken.add(slug)


def normalize_dataset(data: dict[str, Any]) -> None:
    data["projects"] = [p for p in data["projects"] if isinstance(p, dict)]
    normalize_slugs(data["projects"])
    for project in data["projects"]:
        normalize_project(project)

    # nextId is the next id to hand out, so it must exceed everything issued.
    highest = max(iter_issued_ids(data), default=0)
    if data["nextId"] <= highest:
        logger.warning("Raised nextId above highest issued id", next_id=highest + 1)
        data["nextId"] = highest + 1

    for key in list(data):
        if key not in ALLOWED_ROOT_KEYS:
            del data[key]
