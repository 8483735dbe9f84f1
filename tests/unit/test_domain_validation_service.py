"""Tests for DNS checks of custom and redirect domains."""

from unittest.mock import AsyncMock, MagicMock, patch

import dns.asyncresolver
import dns.resolver
import pytest

from src.statuspage.core.exceptions import InvalidDomainError, NoDomainsConfiguredError
from src.statuspage.models.enums import DnsCheckStatus
from src.statuspage.services.domain_validation_service import (
    DnsPythonResolver,
    DomainValidationService,
)
from tests.fakes import StaticDnsResolver

pytestmark = [pytest.mark.unit, pytest.mark.asyncio]

TARGET = "app.example.net"


def make_project(primary: str = "", redirects: list[str] | None = None) -> dict:
    return {
        "id": 7,
        "slug": "acme",
        "settings": {"customDomain": primary, "redirectDomains": redirects or []},
    }


class TestExpectedTarget:
    def test_configured_target_wins(self):
        service = DomainValidationService(StaticDnsResolver(), configured_target="Target.Example")

        assert service.expected_target("serving.example") == "target.example"

    def test_falls_back_to_serving_host(self):
        service = DomainValidationService(StaticDnsResolver())

        assert service.expected_target("App.Example.net:8080") == TARGET
        assert service.expected_target(None) == ""


class TestCheckDomain:
    async def test_invalid_format_does_no_lookups(self):
        resolver = StaticDnsResolver()
        service = DomainValidationService(resolver)

        result = await service.check_domain("not a domain!", TARGET)

        assert result.valid_format is False
        assert result.status is DnsCheckStatus.ERROR
        assert result.notes == ["Invalid domain format"]
        assert resolver.lookups == []

    async def test_no_records_is_error(self):
        service = DomainValidationService(StaticDnsResolver())

        result = await service.check_domain("status.acme.com", TARGET)

        assert result.resolves is False
        assert result.status is DnsCheckStatus.ERROR
        assert result.notes == ["No DNS records found"]

    async def test_cname_to_target_is_ok(self):
        resolver = StaticDnsResolver({("status.acme.com", "CNAME"): ["App.Example.net."]})
        service = DomainValidationService(resolver)

        result = await service.check_domain("status.acme.com", TARGET)

        assert result.cname_records == [TARGET]
        assert result.points_to_expected is True
        assert result.status is DnsCheckStatus.OK

    async def test_shared_address_is_ok(self):
        resolver = StaticDnsResolver(
            {
                ("status.acme.com", "A"): ["203.0.113.5"],
                (TARGET, "A"): ["203.0.113.9", "203.0.113.5"],
            }
        )
        service = DomainValidationService(resolver)

        result = await service.check_domain("status.acme.com", TARGET)

        assert result.points_to_expected is True
        assert result.status is DnsCheckStatus.OK

    async def test_resolving_elsewhere_is_warning(self):
        resolver = StaticDnsResolver(
            {
                ("status.acme.com", "AAAA"): ["2001:db8::1"],
                (TARGET, "AAAA"): ["2001:db8::2"],
            }
        )
        service = DomainValidationService(resolver)

        result = await service.check_domain("status.acme.com", TARGET)

        assert result.resolves is True
        assert result.points_to_expected is False
        assert result.status is DnsCheckStatus.WARNING

    async def test_without_target_resolving_is_enough(self):
        resolver = StaticDnsResolver({("status.acme.com", "A"): ["203.0.113.5"]})
        service = DomainValidationService(resolver)

        result = await service.check_domain("status.acme.com", "")

        assert result.status is DnsCheckStatus.OK
        assert result.points_to_expected is None


class TestValidateProject:
    async def test_redirects_are_checked_against_primary(self):
        resolver = StaticDnsResolver(
            {
                ("status.acme.com", "CNAME"): [TARGET],
                ("www.acme.com", "CNAME"): ["status.acme.com."],
            }
        )
        service = DomainValidationService(resolver, configured_target=TARGET)
        project = make_project("status.acme.com", ["www.acme.com"])

        report = await service.validate_project(project, host_header="ignored.example")

        assert report.project_id == 7
        assert report.expected_target == TARGET
        assert [r.domain for r in report.results] == ["status.acme.com", "www.acme.com"]
        assert [r.expected_target for r in report.results] == [TARGET, "status.acme.com"]
        assert report.all_ok is True

    async def test_requested_domain_only(self):
        service = DomainValidationService(StaticDnsResolver(), configured_target=TARGET)
        project = make_project("status.acme.com", ["www.acme.com"])

        report = await service.validate_project(project, domain="Other.Acme.com")

        assert [r.domain for r in report.results] == ["other.acme.com"]
        assert report.all_ok is False

    async def test_blank_requested_domain_is_invalid(self):
        service = DomainValidationService(StaticDnsResolver())

        with pytest.raises(InvalidDomainError):
            await service.validate_project(make_project("status.acme.com"), domain="   ")

    async def test_project_without_domains(self):
        service = DomainValidationService(StaticDnsResolver())

        with pytest.raises(NoDomainsConfiguredError):
            await service.validate_project(make_project())


class TestDnsPythonResolver:
    async def test_returns_record_text(self):
        record = MagicMock()
        record.to_text.return_value = "203.0.113.5"
        mock_resolver = MagicMock()
        mock_resolver.resolve = AsyncMock(return_value=[record])

        with patch.object(dns.asyncresolver, "Resolver", return_value=mock_resolver):
            values = await DnsPythonResolver(timeout=2.0).lookup("status.acme.com", "A")

        assert values == ["203.0.113.5"]
        mock_resolver.resolve.assert_awaited_once_with("status.acme.com", "A")
        assert mock_resolver.lifetime == 2.0

    async def test_lookup_errors_mean_no_records(self):
        mock_resolver = MagicMock()
        mock_resolver.resolve = AsyncMock(side_effect=dns.resolver.NoAnswer())

        with patch.object(dns.asyncresolver, "Resolver", return_value=mock_resolver):
            values = await DnsPythonResolver().lookup("status.acme.com", "CNAME")

        assert values == []
