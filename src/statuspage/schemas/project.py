from pydantic import BaseModel, Field

from src.statuspage.models.enums import DnsCheckStatus


class DomainSettingsUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged, empty values clear them."""

    custom_domain: str | None = Field(
        default=None,
        max_length=253,
        json_schema_extra={"examples": ["status.example.com"]},
    )
    redirect_domains: list[str] | None = Field(
        default=None,
        json_schema_extra={"examples": [["status.example.org", "www.status.example.com"]]},
    )


class DomainSettingsRead(BaseModel):
    project_id: int
    slug: str
    custom_domain: str
    redirect_domains: list[str]


class DomainCheckResponse(BaseModel):
    domain: str
    available: bool
    conflict_project_id: int | None = None
    conflict_project_name: str | None = None


class DomainInstructions(BaseModel):
    primary: str
    redirect: str


class DomainConfigRead(BaseModel):
    project_id: int
    custom_domain: str
    redirect_domains: list[str]
    expected_target: str
    instructions: DomainInstructions


class DomainValidateRequest(BaseModel):
    """Omit ``domain`` to check every domain configured on the project."""

    domain: str | None = Field(
        default=None,
        max_length=253,
        json_schema_extra={"examples": ["status.example.com"]},
    )


class DnsCheckRead(BaseModel):
    domain: str
    expected_target: str
    valid_format: bool
    resolves: bool
    points_to_expected: bool | None
    cname_records: list[str]
    a_records: list[str]
    aaaa_records: list[str]
    status: DnsCheckStatus
    notes: list[str]


class DomainValidationRead(BaseModel):
    project_id: int
    expected_target: str
    validated_at: str
    all_ok: bool
    results: list[DnsCheckRead]
