"""Cold start reconciliation between the local files and the remote store.

Runs once before the first request. Remote state is authoritative whenever it
exists; the remote store is seeded from the local file only when it has never
been initialized. Every step is best-effort: a failure is logged and the
process carries on with whatever local state it already has.
"""

from src.statuspage.core.exceptions import MalformedLocalFileError, RemoteUnavailableError
from src.statuspage.core.logging import get_logger
from src.statuspage.core.migrations import run_migrations
from src.statuspage.models.enums import HydrationResult
from src.statuspage.remote.mirror import RemoteMirror
from src.statuspage.repositories.local_store import parse_dataset, serialize_dataset
from src.statuspage.services.audit_service import serialize_audit_lines
from src.statuspage.storage.base import Storage

logger = get_logger(__name__)

DEFAULT_AUDIT_HYDRATE_LIMIT = 5000


class ColdStartHydrator:
    """Pulls remote state into the local cache, or seeds the remote once.

    ``storage`` must be the raw storage, not the replicating decorator, so that
    hydration writes are not echoed back to the remote store.
    """

    def __init__(
        self,
        storage: Storage,
        mirror: RemoteMirror,
        data_key: str = "data.json",
        audit_key: str = "audit.log",
        audit_limit: int = DEFAULT_AUDIT_HYDRATE_LIMIT,
    ):
        self.storage = storage
        self.mirror = mirror
        self.data_key = data_key
        self.audit_key = audit_key
        self.audit_limit = audit_limit

    async def run(self) -> HydrationResult:
        result = await self._hydrate_data()
        await self._hydrate_audit()
        return result

    async def _hydrate_data(self) -> HydrationResult:
        try:
            state = await self.mirror.load_state()
        except RemoteUnavailableError as e:
            logger.warning(
                "Unable to load app state from remote store, falling back to local data",
                error=str(e),
            )
            return HydrationResult.FAILED

        if state is not None:
            try:
                self.storage.write(self.data_key, serialize_dataset(state))
            except OSError as e:
                logger.error("Unable to write hydrated state to local file", error=str(e))
                return HydrationResult.FAILED
            logger.info(
                "Loaded app state from remote store",
                projects=len(state["projects"]),
                users=len(state["users"]),
            )
            return HydrationResult.HYDRATED

        return await self._seed_remote()

    async def _seed_remote(self) -> HydrationResult:
        """First boot against an empty remote store: push the local file once."""
        try:
            if await self.mirror.is_initialized():
                return HydrationResult.NOOP
            raw = self.storage.read(self.data_key)
            if raw is None:
                logger.info("Remote store is empty and no local data file exists")
                return HydrationResult.NOOP
            data = parse_dataset(raw)
            run_migrations(data)
            ops = await self.mirror.persist_all(data)
        except MalformedLocalFileError as e:
            logger.warning("Local data file is unreadable, remote store not seeded", error=str(e))
            return HydrationResult.FAILED
        except Exception as e:
            logger.warning(
                "Unable to seed remote store from local data",
                error=str(e),
                error_type=type(e).__name__,
            )
            return HydrationResult.FAILED
        logger.info("Seeded remote store from local data file", ops=ops)
        return HydrationResult.SEEDED

    async def _hydrate_audit(self) -> None:
        try:
            entries = await self.mirror.load_audit(self.audit_limit)
        except RemoteUnavailableError as e:
            logger.warning(
                "Unable to load audit entries from remote store, keeping local audit log",
                error=str(e),
            )
            return
        if not entries:
            return
        try:
            self.storage.write(self.audit_key, serialize_audit_lines(entries))
        except (OSError, TypeError, ValueError) as e:
            logger.error("Unable to write hydrated audit log", error=str(e))
            return
        logger.info("Loaded audit entries from remote store", count=len(entries))
