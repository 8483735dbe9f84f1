"""Input validators for slugs, hostnames and settings fragments."""

import ipaddress
import re
from collections.abc import Iterable, Mapping
from typing import Any, Final
from urllib.parse import urlsplit

MAX_PROJECT_SLUG_LENGTH: Final[int] = 64
MAX_HOSTNAME_LENGTH: Final[int] = 253
PROJECT_SLUG_REGEX: Final[str] = r"^[a-z0-9]+(-[a-z0-9]+)*$"
HOST_LABEL_REGEX: Final[str] = r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$"

ALLOWED_DISABLED_TABS: Final[frozenset[str]] = frozenset(
    {"components", "incidents", "maintenance", "subscribers", "projects", "users", "settings"}
)

_PROJECT_SLUG_PATTERN: Final[re.Pattern[str]] = re.compile(PROJECT_SLUG_REGEX)
_HOST_LABEL_PATTERN: Final[re.Pattern[str]] = re.compile(HOST_LABEL_REGEX)
_DOMAIN_SEPARATORS: Final[re.Pattern[str]] = re.compile(r"[\s,]+")


def make_slug(name: str) -> str:
    """Derive a URL-safe slug from a display name.

    E.g., 'Elite Payments!' -> 'elite-payments'
    """
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def validate_project_slug_format(slug: str) -> str:
    """Validate project slug format (lowercase words joined by single hyphens)."""
    if len(slug) > MAX_PROJECT_SLUG_LENGTH or not _PROJECT_SLUG_PATTERN.match(slug):
        raise ValueError(
            "Slug must contain only lowercase letters and numbers, "
            "with single hyphens as separators"
        )
    return slug


def normalize_domain(value: Any) -> str:
    """Reduce a user-entered domain or Host header to a bare lowercase hostname.

    Accepts values with or without scheme, port or path. Trailing dots are
    stripped. Returns an empty string when nothing usable remains.
    """
    if not isinstance(value, str):
        return ""
    candidate = value.strip().lower()
    if not candidate:
        return ""
    if "://" not in candidate:
        candidate = f"http://{candidate}"
    try:
        hostname = urlsplit(candidate).hostname
    except ValueError:
        return ""
    if not hostname:
        return ""
    return hostname.lower().rstrip(".")


def split_domain_input(value: Any) -> list[str]:
    """Split comma/whitespace separated input (or a list of such strings)."""
    if isinstance(value, str):
        raw = value
    elif isinstance(value, Iterable):
        raw = ",".join(str(item) for item in value if item is not None)
    else:
        raw = ""
    return [part for part in _DOMAIN_SEPARATORS.split(raw) if part]


def normalize_domain_list(value: Any) -> list[str]:
    """Normalize and de-duplicate a domain list, preserving first-seen order."""
    seen: dict[str, None] = {}
    for part in split_domain_input(value):
        host = normalize_domain(part)
        if host:
            seen.setdefault(host, None)
    return list(seen)


def is_valid_domain_host(host: Any) -> bool:
    """Check that a normalized hostname is an IP, localhost or a dotted DNS name."""
    if not host or not isinstance(host, str):
        return False
    try:
        ipaddress.ip_address(host)
        return True
    except ValueError:
        pass
    if host == "localhost":
        return True
    if len(host) > MAX_HOSTNAME_LENGTH or "." not in host:
        return False
    return all(_HOST_LABEL_PATTERN.match(label) for label in host.split("."))


def sanitize_disabled_tabs(value: Any) -> dict[str, bool]:
    """Keep only known admin tab keys, coerced to booleans."""
    if not isinstance(value, Mapping):
        return {}
    return {key: bool(value[key]) for key in sorted(ALLOWED_DISABLED_TABS) if key in value}
