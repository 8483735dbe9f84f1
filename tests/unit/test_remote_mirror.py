"""Tests for replication of the dataset into remote collections."""

import pytest

from src.statuspage.core.exceptions import RemoteUnavailableError
from src.statuspage.core.migrations import CURRENT_SCHEMA_VERSION
from src.statuspage.remote.collections import (
    COLLECTION_AUDIT,
    COLLECTION_META,
    COLLECTION_PROJECTS,
    COLLECTION_PUBLIC_PROJECTS,
    COLLECTION_USERS,
    META_DOCUMENT_ID,
)
from src.statuspage.remote.mirror import RemoteMirror

pytestmark = [pytest.mark.unit, pytest.mark.asyncio]


class TestUpsertCollection:
    async def test_chunks_large_collections(self, mirror, document_store):
        items = [{"id": i, "name": f"user-{i}"} for i in range(1, 1001)]

        ops = await mirror.upsert_collection(COLLECTION_USERS, items)

        assert ops == 1000
        assert document_store.commit_sizes == [400, 400, 200]
        assert len(document_store.docs(COLLECTION_USERS)) == 1000

    async def test_replaying_same_items_commits_nothing(self, mirror, document_store):
        items = [{"id": 1, "name": "a"}, {"id": 2, "name": "b"}]
        await mirror.upsert_collection(COLLECTION_USERS, items)
        commits = len(document_store.commits)

        ops = await mirror.upsert_collection(COLLECTION_USERS, items)

        assert ops == 0
        assert len(document_store.commits) == commits

    async def test_removed_items_are_deleted_remotely(self, mirror, document_store):
        document_store.seed(COLLECTION_USERS, "99", {"id": 99, "name": "gone"})

        await mirror.upsert_collection(COLLECTION_USERS, [{"id": 1, "name": "kept"}])

        assert set(document_store.docs(COLLECTION_USERS)) == {"1"}

    async def test_changed_items_are_overwritten(self, mirror, document_store):
        document_store.seed(COLLECTION_USERS, "1", {"id": 1, "name": "old", "stale": True})

        await mirror.upsert_collection(COLLECTION_USERS, [{"id": 1, "name": "new"}])

        assert document_store.docs(COLLECTION_USERS)["1"] == {"id": 1, "name": "new"}

    async def test_items_without_id_are_skipped(self, mirror, document_store):
        ops = await mirror.upsert_collection(
            COLLECTION_USERS, [{"name": "no id"}, {"id": ""}, {"id": True}, "junk", {"id": 5}]
        )

        assert ops == 1
        assert set(document_store.docs(COLLECTION_USERS)) == {"5"}

    async def test_volatile_fields_are_ignored_when_diffing(self, mirror, document_store):
        await mirror.upsert_collection(
            COLLECTION_PUBLIC_PROJECTS,
            [{"id": 1, "updatedAt": "2026-01-01T00:00:00.000Z"}],
            volatile=frozenset({"updatedAt"}),
        )

        ops = await mirror.upsert_collection(
            COLLECTION_PUBLIC_PROJECTS,
            [{"id": 1, "updatedAt": "2026-06-01T00:00:00.000Z"}],
            volatile=frozenset({"updatedAt"}),
        )

        assert ops == 0

    def test_batch_size_must_be_positive(self, document_store):
        with pytest.raises(ValueError):
            RemoteMirror(document_store, batch_size=0)


class TestPersistAll:
    async def test_writes_every_collection(self, mirror, document_store, store):
        await mirror.persist_all(store.data)

        meta = document_store.docs(COLLECTION_META)[META_DOCUMENT_ID]
        assert meta["nextId"] == store.data["nextId"]
        assert meta["localSchemaVersion"] == CURRENT_SCHEMA_VERSION
        assert set(document_store.docs(COLLECTION_PROJECTS)) == {"1", "2", "3"}
        public = document_store.docs(COLLECTION_PUBLIC_PROJECTS)
        assert set(public) == {"1", "2", "3"}
        assert "supportEmail" not in public["1"]["settings"]
        assert "overallStatus" in public["1"]

    async def test_persist_all_is_idempotent(self, mirror, document_store, store):
        await mirror.persist_all(store.data)
        commits = len(document_store.commits)

        ops = await mirror.persist_all(store.data)

        assert ops == 0
        assert len(document_store.commits) == commits

    async def test_deleted_project_disappears_from_both_collections(
        self, mirror, document_store, store
    ):
        await mirror.persist_all(store.data)
        store.data["projects"] = [p for p in store.projects if p["id"] != 3]

        await mirror.persist_all(store.data)

        assert "3" not in document_store.docs(COLLECTION_PROJECTS)
        assert "3" not in document_store.docs(COLLECTION_PUBLIC_PROJECTS)

    async def test_tolerates_malformed_dataset(self, mirror, document_store):
        await mirror.persist_all({"users": "nope", "projects": None})

        assert document_store.docs(COLLECTION_USERS) == {}
        assert META_DOCUMENT_ID in document_store.docs(COLLECTION_META)


class TestAppendAudit:
    async def test_entries_are_added_never_replaced(self, mirror, document_store):
        document_store.seed(COLLECTION_AUDIT, "existing", {"at": "2026-01-01", "action": "x"})

        count = await mirror.append_audit([{"at": "2026-01-02", "action": "a"}, {"at": "2026-01-03", "action": "b"}])

        assert count == 2
        audit = document_store.docs(COLLECTION_AUDIT)
        assert len(audit) == 3
        assert audit["existing"]["action"] == "x"

    async def test_empty_entries_commit_nothing(self, mirror, document_store):
        assert await mirror.append_audit([]) == 0
        assert document_store.commits == []


class TestReadSide:
    async def test_load_state_empty_store(self, mirror):
        assert await mirror.load_state() is None

    async def test_load_state_round_trips_persisted_dataset(self, mirror, store):
        await mirror.persist_all(store.data)

        state = await mirror.load_state()

        assert [p["id"] for p in state["projects"]] == [1, 2, 3]
        assert state["projects"] == store.data["projects"]
        assert state["nextId"] == store.data["nextId"]
        assert state["schemaVersion"] == CURRENT_SCHEMA_VERSION

    async def test_load_state_sorts_by_numeric_id(self, mirror, document_store):
        for doc_id in ("10", "9", "100"):
            document_store.seed(COLLECTION_PROJECTS, doc_id, {"id": int(doc_id)})

        state = await mirror.load_state()

        assert [p["id"] for p in state["projects"]] == [9, 10, 100]

    async def test_load_state_wraps_remote_errors(self, mirror, document_store):
        document_store.fail_reads = True

        with pytest.raises(RemoteUnavailableError):
            await mirror.load_state()

    async def test_load_audit_oldest_first_with_limit(self, mirror, document_store):
        for n in (3, 1, 2):
            document_store.seed(COLLECTION_AUDIT, f"a{n}", {"at": f"2026-01-0{n}", "n": n})

        entries = await mirror.load_audit(limit=2)

        assert [e["n"] for e in entries] == [1, 2]

    async def test_is_initialized(self, mirror, document_store):
        assert not await mirror.is_initialized()

        document_store.seed(COLLECTION_PUBLIC_PROJECTS, "1", {"id": 1})

        assert await mirror.is_initialized()
