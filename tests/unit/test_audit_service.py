"""Unit tests for AuditService."""

from unittest.mock import MagicMock

import pytest

from src.statuspage.services.audit_service import (
    AuditService,
    parse_audit_lines,
    summarize_action,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def audit_service(storage) -> AuditService:
    return AuditService(storage, audit_key="audit.log")


class TestLogAction:
    """Tests for log_action method."""

    def test_log_action_appends_json_line(self, audit_service, storage):
        entry = audit_service.log_action(
            {"id": 1, "username": "admin@example.com", "role": "admin", "passwordHash": "x"},
            "project.create",
            {"name": "Acme"},
        )

        assert entry is not None
        [stored] = parse_audit_lines(storage.read("audit.log"))
        assert stored["action"] == "project.create"
        assert stored["meta"] == {"name": "Acme"}
        assert stored["user"] == {"id": 1, "username": "admin@example.com", "role": "admin"}

    def test_log_action_without_user(self, audit_service):
        entry = audit_service.log_action(None, "auth.login")

        assert entry["user"] is None
        assert entry["meta"] == {}

    def test_log_action_does_not_raise_on_storage_failure(self):
        storage = MagicMock()
        storage.append.side_effect = OSError("disk full")
        service = AuditService(storage)

        assert service.log_action(None, "auth.login") is None


class TestReadEntries:
    def test_newest_first_with_limit(self, audit_service):
        for action in ("component.create", "component.update", "component.delete"):
            audit_service.log_action(None, action)

        entries = audit_service.read_entries(limit=2)

        assert [e["action"] for e in entries] == ["component.delete", "component.update"]

    def test_malformed_lines_are_skipped(self, audit_service, storage):
        storage.append("audit.log", b'{"action": "user.create"}\nnot json\n\n{"action": "user.delete"}\n')

        assert [e["action"] for e in audit_service.read_entries()] == ["user.delete", "user.create"]

    def test_missing_log_is_empty(self, audit_service):
        assert audit_service.read_entries() == []


class TestSummarizeAction:
    def test_settings_update_lists_fields(self):
        summary = summarize_action("settings.update", {"fields": ["customDomain", "redirectDomains"]})
        assert summary == "Updated settings (customDomain, redirectDomains)"

    def test_settings_update_truncates_long_field_lists(self):
        summary = summarize_action("settings.update", {"fields": list("abcdef")})
        assert summary == "Updated settings (a, b, c, d, ...)"

    def test_project_create_includes_name(self):
        assert summarize_action("project.create", {"name": "Acme"}) == 'Created project "Acme"'

    def test_unknown_action_falls_back_to_action(self):
        assert summarize_action("custom.thing") == "custom.thing"
