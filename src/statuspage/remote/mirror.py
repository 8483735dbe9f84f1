"""Replication of the local dataset into per-entity remote collections.

Each collection is made an exact mirror of the local list: items present
locally are written as full documents, remote documents whose id disappeared
locally are deleted. Writes are committed in batches bounded by the store's
per-batch operation limit.
"""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from src.statuspage.core.exceptions import RemoteUnavailableError
from src.statuspage.core.logging import get_logger
from src.statuspage.core.migrations import FALLBACK_NEXT_ID
from src.statuspage.models.base import utc_now_iso
from src.statuspage.remote.collections import (
    COLLECTION_AUDIT,
    COLLECTION_META,
    COLLECTION_PROJECTS,
    COLLECTION_PUBLIC_PROJECTS,
    COLLECTION_USERS,
    META_DOCUMENT_ID,
    REMOTE_SCHEMA_VERSION,
)
from src.statuspage.remote.document_store import DocumentStore, WriteOp
from src.statuspage.services.snapshot_service import SnapshotProjector

logger = get_logger(__name__)

DEFAULT_BATCH_SIZE = 400

# Stamped on every write; excluded when deciding whether a document changed.
VOLATILE_FIELDS = frozenset({"updatedAt"})


def _doc_id(item: Any) -> str | None:
    if not isinstance(item, Mapping):
        return None
    value = item.get("id")
    if value is None or isinstance(value, bool) or value == "":
        return None
    return str(value)


def _stable(doc: Mapping[str, Any] | None, volatile: frozenset[str]) -> dict[str, Any] | None:
    if doc is None:
        return None
    return {k: v for k, v in doc.items() if k not in volatile}


def _by_numeric_id(doc: Mapping[str, Any]) -> tuple[float, str]:
    value = doc.get("id")
    try:
        return float(value), str(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0, str(value)


class RemoteMirror:
    """Converges the remote store to the local dataset."""

    def __init__(
        self,
        store: DocumentStore,
        projector: SnapshotProjector | None = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be positive")
        self.store = store
        self.projector = projector or SnapshotProjector()
        self.batch_size = batch_size

    # --- Write side -------------------------------------------------------

    async def commit_ops(self, ops: Sequence[WriteOp]) -> int:
        """Commit ops in chunks of at most batch_size; each chunk is atomic.

        Returns:
            Number of batches committed.
        """
        batches = 0
        for start in range(0, len(ops), self.batch_size):
            chunk = ops[start : start + self.batch_size]
            await self.store.commit_batch(chunk)
            batches += 1
            logger.debug("Committed remote batch", ops=len(chunk), batch=batches)
        return batches

    async def upsert_collection(
        self,
        collection: str,
        items: Iterable[Any],
        volatile: frozenset[str] = frozenset(),
    ) -> int:
        """Make ``collection`` mirror ``items`` keyed by their ``id``.

        Documents whose content already matches are left alone, so replaying an
        unchanged list commits nothing. Items without a usable id are skipped.

        Returns:
            Number of write operations committed.
        """
        existing = await self.store.fetch_all(collection)
        ops: list[WriteOp] = []
        seen: set[str] = set()

        for item in items:
            doc_id = _doc_id(item)
            if doc_id is None:
                continue
            seen.add(doc_id)
            data = dict(item)
            if _stable(existing.get(doc_id), volatile) == _stable(data, volatile):
                continue
            ops.append(WriteOp("set", collection, doc_id, data))

        for doc_id in existing.keys() - seen:
            ops.append(WriteOp("delete", collection, doc_id))

        if ops:
            batches = await self.commit_ops(ops)
            logger.info(
                "Replicated collection",
                collection=collection,
                ops=len(ops),
                batches=batches,
            )
        return len(ops)

    async def persist_meta(self, dataset: Mapping[str, Any]) -> int:
        meta = {
            "nextId": dataset.get("nextId") or FALLBACK_NEXT_ID,
            "securityMigrations": dataset.get("securityMigrations") or {},
            "schemaVersion": REMOTE_SCHEMA_VERSION,
            "localSchemaVersion": dataset.get("schemaVersion") or 0,
            "updatedAt": utc_now_iso(),
        }
        current = await self.store.get_document(COLLECTION_META, META_DOCUMENT_ID)
        if _stable(current, VOLATILE_FIELDS) == _stable(meta, VOLATILE_FIELDS):
            return 0
        await self.commit_ops([WriteOp("set", COLLECTION_META, META_DOCUMENT_ID, meta)])
        return 1

    async def persist_all(self, dataset: Any) -> int:
        """Replicate the full dataset: meta, users, projects and public projections.

        Returns:
            Total number of write operations committed.
        """
        safe = dataset if isinstance(dataset, Mapping) else {}
        users = safe.get("users") if isinstance(safe.get("users"), list) else []
        projects = safe.get("projects") if isinstance(safe.get("projects"), list) else []
        snapshots = [self.projector.project(p) for p in projects if isinstance(p, Mapping)]

        total = await self.persist_meta(safe)
        total += await self.upsert_collection(COLLECTION_USERS, users)
        total += await self.upsert_collection(COLLECTION_PROJECTS, projects)
        total += await self.upsert_collection(
            COLLECTION_PUBLIC_PROJECTS, snapshots, volatile=VOLATILE_FIELDS
        )
        return total

    async def append_audit(self, entries: Sequence[Mapping[str, Any]]) -> int:
        """Add each audit entry as a new document. Never touches existing ones."""
        ops = [
            WriteOp("set", COLLECTION_AUDIT, self.store.new_document_id(COLLECTION_AUDIT), dict(e))
            for e in entries
        ]
        if ops:
            await self.commit_ops(ops)
            logger.debug("Replicated audit entries", count=len(ops))
        return len(ops)

    # --- Read side (used by cold start hydration) -------------------------

    async def load_state(self) -> dict[str, Any] | None:
        """Read the remote dataset, or None when nothing was ever replicated.

        Raises:
            RemoteUnavailableError: If the remote store cannot be read.
        """
        try:
            meta = await self.store.get_document(COLLECTION_META, META_DOCUMENT_ID)
            users = list((await self.store.fetch_all(COLLECTION_USERS)).values())
            projects = list((await self.store.fetch_all(COLLECTION_PROJECTS)).values())
        except Exception as e:
            raise RemoteUnavailableError(f"Reading remote state failed: {e}") from e
        users.sort(key=_by_numeric_id)
        projects.sort(key=_by_numeric_id)
        if meta is None and not users and not projects:
            return None

        meta = meta or {}
        state: dict[str, Any] = {
            "users": users,
            "projects": projects,
            "nextId": meta.get("nextId") or FALLBACK_NEXT_ID,
            "securityMigrations": meta.get("securityMigrations") or {},
        }
        if meta.get("localSchemaVersion"):
            state["schemaVersion"] = meta["localSchemaVersion"]
        return state

    async def load_audit(self, limit: int) -> list[dict[str, Any]]:
        """Oldest-first audit entries, at most ``limit``."""
        if limit <= 0:
            return []
        try:
            return await self.store.fetch_ordered(COLLECTION_AUDIT, "at", limit)
        except Exception as e:
            raise RemoteUnavailableError(f"Reading remote audit log failed: {e}") from e

    async def is_initialized(self) -> bool:
        """True once a meta document or any public projection exists remotely."""
        if await self.store.get_document(COLLECTION_META, META_DOCUMENT_ID) is not None:
            return True
        return await self.store.has_documents(COLLECTION_PUBLIC_PROJECTS)
