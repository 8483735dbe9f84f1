"""DNS checks for custom and redirect domains.

A domain is healthy when it resolves and either has a CNAME to the expected
target or shares an A/AAAA address with it. Lookup failures count as "no
records"; they never raise to the caller.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

import dns.asyncresolver
import dns.exception

from src.statuspage.core.exceptions import InvalidDomainError, NoDomainsConfiguredError
from src.statuspage.core.logging import get_logger
from src.statuspage.core.security import is_valid_domain_host, normalize_domain
from src.statuspage.models.base import utc_now_iso
from src.statuspage.models.enums import DnsCheckStatus
from src.statuspage.services.tenant_resolver import project_domain_config

logger = get_logger(__name__)


class DnsResolver(Protocol):
    async def lookup(self, host: str, record_type: str) -> list[str]:
        """Record values of ``record_type`` for ``host``; empty when none resolve."""
        ...


class DnsPythonResolver:
    """``DnsResolver`` backed by dnspython's asyncio resolver."""

    def __init__(self, timeout: float = 5.0):
        self.timeout = timeout
        self._resolver: dns.asyncresolver.Resolver | None = None

    def _get_resolver(self) -> dns.asyncresolver.Resolver:
        # Construction reads the system resolver configuration.
        if self._resolver is None:
            self._resolver = dns.asyncresolver.Resolver()
            self._resolver.lifetime = self.timeout
        return self._resolver

    async def lookup(self, host: str, record_type: str) -> list[str]:
        try:
            answer = await self._get_resolver().resolve(host, record_type)
        except dns.exception.DNSException as e:
            logger.debug(
                "DNS lookup returned no records",
                host=host,
                record_type=record_type,
                error_type=type(e).__name__,
            )
            return []
        return [rdata.to_text() for rdata in answer]


@dataclass
class DnsCheck:
    domain: str
    expected_target: str
    valid_format: bool
    resolves: bool = False
    points_to_expected: bool | None = None
    cname_records: list[str] = field(default_factory=list)
    a_records: list[str] = field(default_factory=list)
    aaaa_records: list[str] = field(default_factory=list)
    status: DnsCheckStatus = DnsCheckStatus.ERROR
    notes: list[str] = field(default_factory=list)


@dataclass
class DomainValidationReport:
    project_id: Any
    expected_target: str
    validated_at: str
    results: list[DnsCheck]

    @property
    def all_ok(self) -> bool:
        return all(result.status is DnsCheckStatus.OK for result in self.results)


class DomainValidationService:
    def __init__(self, resolver: DnsResolver, configured_target: str | None = None):
        self.resolver = resolver
        self.configured_target = configured_target

    def expected_target(self, host_header: str | None = None) -> str:
        """Hostname custom domains should point at: configured target, else the serving host."""
        return normalize_domain(self.configured_target or host_header or "")

    async def check_domain(self, domain: str, expected_target: str = "") -> DnsCheck:
        host = normalize_domain(domain)
        target = normalize_domain(expected_target)
        result = DnsCheck(
            domain=host,
            expected_target=target,
            valid_format=bool(host) and is_valid_domain_host(host),
        )
        if not result.valid_format:
            result.notes.append("Invalid domain format")
            return result

        result.cname_records = [
            name
            for name in (normalize_domain(r) for r in await self.resolver.lookup(host, "CNAME"))
            if name
        ]
        result.a_records = await self.resolver.lookup(host, "A")
        result.aaaa_records = await self.resolver.lookup(host, "AAAA")
        result.resolves = bool(result.cname_records or result.a_records or result.aaaa_records)

        if not result.resolves:
            result.notes.append("No DNS records found")
            return result

        if not target:
            result.status = DnsCheckStatus.OK
            result.notes.append("DNS resolves (expected target not configured on server)")
            return result

        points = target in result.cname_records
        if not points:
            expected_ips = set(await self.resolver.lookup(target, "A"))
            expected_ips.update(await self.resolver.lookup(target, "AAAA"))
            points = any(ip in expected_ips for ip in result.a_records + result.aaaa_records)

        result.points_to_expected = points
        if points:
            result.status = DnsCheckStatus.OK
            result.notes.append("DNS points to expected target")
        else:
            result.status = DnsCheckStatus.WARNING
            result.notes.append("DNS resolves but does not yet match expected target")
        return result

    async def validate_project(
        self,
        project: Mapping[str, Any],
        host_header: str | None = None,
        domain: str | None = None,
    ) -> DomainValidationReport:
        """Check one requested domain, or every domain configured on the project.

        The primary domain is checked against the expected target; redirect
        domains against the primary domain when one is set.

        Raises:
            InvalidDomainError: ``domain`` was given but normalizes to nothing.
            NoDomainsConfiguredError: No domain was given and none is configured.
        """
        config = project_domain_config(project)
        if domain is not None:
            requested = normalize_domain(domain)
            if not requested:
                raise InvalidDomainError(domain)
            domains = [requested]
        else:
            domains = config.all
        if not domains:
            raise NoDomainsConfiguredError(project.get("id"))

        expected = self.expected_target(host_header)
        results = []
        for host in dict.fromkeys(domains):
            target = expected if host == config.primary else (config.primary or expected)
            results.append(await self.check_domain(host, target))

        report = DomainValidationReport(
            project_id=project.get("id"),
            expected_target=expected,
            validated_at=utc_now_iso(),
            results=results,
        )
        logger.info(
            "Validated project domains",
            project_id=report.project_id,
            domains=len(results),
            all_ok=report.all_ok,
        )
        return report
