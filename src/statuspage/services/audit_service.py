"""Audit logging service - append-only trail of administrative actions."""

import json
from collections.abc import Mapping
from typing import Any

from src.statuspage.core.logging import get_logger
from src.statuspage.models.base import utc_now_iso
from src.statuspage.storage.base import Storage

logger = get_logger(__name__)

_ACTION_SUMMARIES = {
    "project.update": "Updated project details",
    "project.delete": "Deleted project",
    "component.create": "Created component",
    "component.update": "Updated component",
    "component.reorder": "Reordered components",
    "component.delete": "Deleted component",
    "incident.create": "Created incident",
    "incident.update": "Updated incident",
    "incident.delete": "Deleted incident",
    "maintenance.create": "Created scheduled maintenance",
    "maintenance.update": "Updated scheduled maintenance",
    "maintenance.delete": "Deleted scheduled maintenance",
    "subscriber.delete": "Removed subscriber",
    "user.create": "Created user",
    "user.update": "Updated user",
    "user.delete": "Deleted user",
    "auth.login": "Logged in",
}


def parse_audit_lines(raw: bytes | str) -> list[dict[str, Any]]:
    """Decode newline-delimited JSON, skipping blank and malformed lines."""
    text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
    entries = []
    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            entry = json.loads(line)
        except json.JSONDecodeError:
            continue
        if isinstance(entry, dict):
            entries.append(entry)
    return entries


def serialize_audit_lines(entries: list[Mapping[str, Any]]) -> bytes:
    return "".join(json.dumps(e, ensure_ascii=False) + "\n" for e in entries).encode("utf-8")


def summarize_action(action: str, meta: Mapping[str, Any] | None = None) -> str:
    m = meta or {}
    if action == "settings.update":
        fields = [f for f in m.get("fields") or [] if f]
        if fields:
            more = ", ..." if len(fields) > 4 else ""
            return f"Updated settings ({', '.join(fields[:4])}{more})"
        return "Updated project settings"
    if action == "project.create":
        return f'Created project "{m.get("name") or ""}"'
    return _ACTION_SUMMARIES.get(action, action)


class AuditService:
    """Writes and reads the audit log through the shared storage.

    Fire-and-forget design: logging failures should not block business operations.
    """

    def __init__(self, storage: Storage, audit_key: str = "audit.log"):
        self.storage = storage
        self.audit_key = audit_key

    def log_action(
        self,
        user: Mapping[str, Any] | None,
        action: str,
        meta: Mapping[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        """Append one entry. Failures are logged but do not raise.

        Returns:
            The entry written, or None if writing failed.
        """
        entry = {
            "at": utc_now_iso(),
            "user": (
                {"id": user.get("id"), "username": user.get("username"), "role": user.get("role")}
                if user
                else None
            ),
            "action": action,
            "meta": dict(meta or {}),
        }
        try:
            self.storage.append(self.audit_key, serialize_audit_lines([entry]))
        except (OSError, TypeError, ValueError) as e:
            logger.warning("Failed to record audit log", action=action, error=str(e))
            return None
        logger.debug("Audit log recorded", action=action)
        return entry

    def read_entries(self, limit: int = 50) -> list[dict[str, Any]]:
        """Most recent entries first."""
        try:
            raw = self.storage.read(self.audit_key)
        except OSError as e:
            logger.warning("Failed to read audit log", error=str(e))
            return []
        if not raw or limit <= 0:
            return []
        return list(reversed(parse_audit_lines(raw)))[:limit]
