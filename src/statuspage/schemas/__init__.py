from src.statuspage.schemas.audit import AuditEntryRead, AuditUser
from src.statuspage.schemas.project import (
    DnsCheckRead,
    DomainCheckResponse,
    DomainConfigRead,
    DomainInstructions,
    DomainSettingsRead,
    DomainSettingsUpdate,
    DomainValidateRequest,
    DomainValidationRead,
)

__all__ = [
    # Audit
    "AuditEntryRead",
    "AuditUser",
    # Project domains
    "DomainCheckResponse",
    "DomainSettingsRead",
    "DomainSettingsUpdate",
    # DNS checks
    "DnsCheckRead",
    "DomainConfigRead",
    "DomainInstructions",
    "DomainValidateRequest",
    "DomainValidationRead",
]
