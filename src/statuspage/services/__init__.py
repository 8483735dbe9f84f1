"""Service layer.

Import ``ColdStartHydrator`` from its module; ``remote.mirror`` imports this package.
"""

from src.statuspage.services.audit_service import AuditService
from src.statuspage.services.domain_settings_service import DomainSettingsService
from src.statuspage.services.domain_validation_service import DomainValidationService
from src.statuspage.services.snapshot_service import SnapshotProjector
from src.statuspage.services.tenant_resolver import TenantResolver

__all__ = [
    "AuditService",
    "DomainSettingsService",
    "DomainValidationService",
    "SnapshotProjector",
    "TenantResolver",
]
