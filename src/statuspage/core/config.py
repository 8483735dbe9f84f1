from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

AZURE_DATA_DIR = Path("/home/data")
CLOUD_FUNCTIONS_DATA_DIR = Path("/tmp")
LOCAL_DATA_DIR = Path("data")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_name: str = "Status Page"
    app_env: str = "development"  # development, testing, production
    debug: bool = False

    # Local storage
    data_dir: Path | None = None  # Overrides platform detection when set
    data_file_name: str = "data.json"
    audit_file_name: str = "audit.log"

    # Platform signals (set by the hosting environment, not by operators)
    website_site_name: str | None = None  # Azure App Service
    k_service: str | None = None  # Cloud Run / Cloud Functions gen2
    function_target: str | None = None  # Cloud Functions

    # Replication (Firestore)
    firestore_sync_enabled: bool | None = None  # None = detect from environment
    firestore_project_id: str | None = None
    firestore_database: str | None = None
    firestore_emulator_host: str | None = None
    gcloud_project: str | None = None
    google_cloud_project: str | None = None
    firebase_config: str | None = None
    sync_batch_size: int = Field(default=400, ge=1, le=500)  # Firestore caps a batch at 500
    audit_hydrate_limit: int = Field(default=5000, ge=0)

    # Custom domains (DNS checks)
    custom_domain_target: str | None = None  # Hostname CNAME records should point at
    website_hostname: str | None = None  # Azure App Service default hostname
    dns_timeout: float = Field(default=5.0, gt=0)

    # Initial admin (seeded into an empty user list)
    initial_admin_email: str | None = None
    initial_admin_password: str | None = None
    argon2_time_cost: int = 3
    argon2_memory_cost: int = 65536
    argon2_parallelism: int = 1

    # API protection
    admin_api_key: str | None = None  # If set, /api/v1/admin requires X-Admin-Key
    metrics_api_key: str | None = None  # If set, /metrics requires X-Metrics-Key

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Shutdown
    shutdown_grace_period: int = 30  # Seconds to wait for queued replication

    @field_validator("data_file_name", "audit_file_name")
    @classmethod
    def validate_file_name(cls, v: str) -> str:
        if not v or "/" in v or "\\" in v or v in (".", ".."):
            raise ValueError("File names must be plain names inside DATA_DIR")
        return v

    @field_validator("cors_origins")
    @classmethod
    def validate_cors_origins(cls, v: list[str]) -> list[str]:
        """Validate CORS origins - reject wildcards when credentials are used."""
        for origin in v:
            if origin == "*":
                raise ValueError(
                    "CORS wildcard '*' is not allowed when allow_credentials=True. "
                    "Specify explicit origins instead."
                )
        return v

    @property
    def replication_enabled(self) -> bool:
        """Whether local writes are mirrored to Firestore.

        An explicit FIRESTORE_SYNC_ENABLED wins. Otherwise replication turns on
        when the process runs in a managed Google Cloud context or against the
        emulator, and stays off in plain local development.
        """
        if self.firestore_sync_enabled is not None:
            return self.firestore_sync_enabled
        return any(
            (
                self.firestore_emulator_host,
                self.gcloud_project,
                self.google_cloud_project,
                self.firebase_config,
            )
        )

    @property
    def resolved_project_id(self) -> str | None:
        return self.firestore_project_id or self.google_cloud_project or self.gcloud_project

    @property
    def resolved_data_dir(self) -> Path:
        if self.data_dir is not None:
            return self.data_dir
        if self.website_site_name:
            return AZURE_DATA_DIR
        if self.k_service or self.function_target:
            return CLOUD_FUNCTIONS_DATA_DIR
        return LOCAL_DATA_DIR


@lru_cache
def get_settings() -> Settings:
    return Settings()
