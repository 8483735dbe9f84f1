"""Storage decorator that schedules remote replication after local writes.

The local write always completes first and is never delayed by the remote
store: the replication task is only queued, and its outcome is invisible to
the caller except through logs.
"""

import json
from functools import partial
from typing import TYPE_CHECKING

from src.statuspage.core.logging import get_logger
from src.statuspage.core.sync_queue import SyncQueue
from src.statuspage.remote.mirror import RemoteMirror
from src.statuspage.services.audit_service import parse_audit_lines
from src.statuspage.storage.base import Storage

if TYPE_CHECKING:
    from src.statuspage.repositories.local_store import LocalStore
    from src.statuspage.services.audit_service import AuditService

logger = get_logger(__name__)


class ReplicatingStorage:
    """Wraps a Storage; writes of the data file and appends to the audit log replicate."""

    def __init__(
        self,
        inner: Storage,
        mirror: RemoteMirror,
        queue: SyncQueue,
        data_key: str,
        audit_key: str,
    ):
        self.inner = inner
        self.mirror = mirror
        self.queue = queue
        self.data_key = data_key
        self.audit_key = audit_key

    def read(self, key: str) -> bytes | None:
        return self.inner.read(key)

    def exists(self, key: str) -> bool:
        return self.inner.exists(key)

    def copy(self, key: str, dest_key: str) -> None:
        self.inner.copy(key, dest_key)

    def write(self, key: str, data: bytes) -> None:
        self.inner.write(key, data)
        if key != self.data_key:
            return
        # Parse now: the task must replicate exactly what was written, even if
        # the in-memory dataset changes again before the task runs.
        try:
            dataset = json.loads(data)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Written data file is not valid JSON, not replicated", error=str(e))
            return
        self.queue.enqueue(partial(self.mirror.persist_all, dataset), name="persist_all")

    def append(self, key: str, data: bytes) -> None:
        self.inner.append(key, data)
        if key != self.audit_key:
            return
        entries = parse_audit_lines(data)
        if entries:
            self.queue.enqueue(partial(self.mirror.append_audit, entries), name="append_audit")


def install_write_interceptor(
    store: "LocalStore",
    audit: "AuditService",
    mirror: RemoteMirror,
    queue: SyncQueue,
) -> ReplicatingStorage:
    """Route the store's and the audit log's writes through a ReplicatingStorage.

    Idempotent: a second call returns the decorator already installed.
    """
    if isinstance(store.storage, ReplicatingStorage):
        audit.storage = store.storage
        return store.storage

    replicating = ReplicatingStorage(
        store.storage,
        mirror,
        queue,
        data_key=store.data_key,
        audit_key=audit.audit_key,
    )
    store.storage = replicating
    audit.storage = replicating
    logger.info("Write replication installed", data_key=store.data_key, audit_key=audit.audit_key)
    return replicating
