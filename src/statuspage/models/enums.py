"""Shared enums for stored records."""

from enum import Enum


class UserRole(str, Enum):
    """Role of an administrative user."""

    ADMIN = "admin"
    EDITOR = "editor"


class ComponentStatus(str, Enum):
    """Component status, declared from most to least severe."""

    MAJOR_OUTAGE = "major_outage"
    PARTIAL_OUTAGE = "partial_outage"
    DEGRADED_PERFORMANCE = "degraded_performance"
    UNDER_MAINTENANCE = "under_maintenance"
    OPERATIONAL = "operational"


class HydrationResult(str, Enum):
    """Outcome of the cold start reconciliation with the remote store."""

    DISABLED = "disabled"
    HYDRATED = "hydrated"
    SEEDED = "seeded"
    NOOP = "noop"
    FAILED = "failed"


class DnsCheckStatus(str, Enum):
    """Result of checking a custom domain's DNS records."""

    OK = "ok"
    WARNING = "warning"
    ERROR = "error"
