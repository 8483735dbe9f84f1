"""Process wiring: builds the core services in startup order and tears them down."""

from dataclasses import dataclass

from src.statuspage.core.config import Settings
from src.statuspage.core.firestore import close_firestore_client, get_firestore_client
from src.statuspage.core.logging import get_logger
from src.statuspage.core.sync_queue import SyncQueue
from src.statuspage.models.enums import HydrationResult
from src.statuspage.remote.document_store import DocumentStore, FirestoreDocumentStore
from src.statuspage.remote.mirror import RemoteMirror
from src.statuspage.repositories.local_store import LocalStore
from src.statuspage.services.audit_service import AuditService
from src.statuspage.services.domain_settings_service import DomainSettingsService
from src.statuspage.services.domain_validation_service import (
    DnsPythonResolver,
    DnsResolver,
    DomainValidationService,
)
from src.statuspage.services.hydration_service import ColdStartHydrator
from src.statuspage.services.snapshot_service import SnapshotProjector
from src.statuspage.services.tenant_resolver import TenantResolver
from src.statuspage.storage.base import Storage
from src.statuspage.storage.file import FileStorage
from src.statuspage.storage.replicating import install_write_interceptor

logger = get_logger(__name__)


@dataclass
class Runtime:
    settings: Settings
    storage: Storage
    store: LocalStore
    audit: AuditService
    resolver: TenantResolver
    projector: SnapshotProjector
    domain_settings: DomainSettingsService
    domain_validation: DomainValidationService
    queue: SyncQueue
    mirror: RemoteMirror | None
    hydration: HydrationResult

    @property
    def replication_enabled(self) -> bool:
        return self.mirror is not None


def _create_document_store(settings: Settings) -> DocumentStore | None:
    try:
        return FirestoreDocumentStore(get_firestore_client(settings))
    except Exception as e:
        # Missing credentials or project id: keep serving from local files.
        logger.warning(
            "Firestore client unavailable, running in local-only mode",
            error=str(e),
            error_type=type(e).__name__,
        )
        return None


async def build_runtime(
    settings: Settings,
    document_store: DocumentStore | None = None,
    storage: Storage | None = None,
    dns_resolver: DnsResolver | None = None,
) -> Runtime:
    """Hydrate, install replication, then load the local dataset.

    Hydration runs on the raw storage before the write interceptor exists, so
    pulling remote state into the local file is not replicated back.
    """
    storage = storage or FileStorage(settings.resolved_data_dir)
    projector = SnapshotProjector()
    queue = SyncQueue(enabled=settings.replication_enabled)
    store = LocalStore(
        storage,
        data_key=settings.data_file_name,
        initial_admin_email=settings.initial_admin_email,
        initial_admin_password=settings.initial_admin_password,
    )
    audit = AuditService(storage, audit_key=settings.audit_file_name)

    mirror: RemoteMirror | None = None
    hydration = HydrationResult.DISABLED
    if settings.replication_enabled:
        document_store = document_store or _create_document_store(settings)
        if document_store is None:
            queue.enabled = False
            hydration = HydrationResult.FAILED
        else:
            mirror = RemoteMirror(document_store, projector, batch_size=settings.sync_batch_size)
            hydrator = ColdStartHydrator(
                storage,
                mirror,
                data_key=settings.data_file_name,
                audit_key=settings.audit_file_name,
                audit_limit=settings.audit_hydrate_limit,
            )
            hydration = await hydrator.run()
            install_write_interceptor(store, audit, mirror, queue)
            queue.start()
    else:
        logger.info(
            "Remote replication disabled (no Firebase project or emulator context detected). "
            "Using local files only."
        )

    store.load()
    resolver = TenantResolver(store)
    return Runtime(
        settings=settings,
        storage=storage,
        store=store,
        audit=audit,
        resolver=resolver,
        projector=projector,
        domain_settings=DomainSettingsService(store, resolver, audit),
        domain_validation=DomainValidationService(
            dns_resolver or DnsPythonResolver(timeout=settings.dns_timeout),
            configured_target=settings.custom_domain_target or settings.website_hostname,
        ),
        queue=queue,
        mirror=mirror,
        hydration=hydration,
    )


async def shutdown_runtime(runtime: Runtime, grace_period: float) -> None:
    """Give queued replication a bounded chance to finish, then stop."""
    if runtime.queue.is_running:
        logger.info(
            f"Waiting up to {grace_period}s for replication queue to drain",
            pending=runtime.queue.pending_count,
        )
        await runtime.queue.drain(timeout=grace_period)
    await runtime.queue.stop()
    if runtime.replication_enabled:
        await close_firestore_client()
