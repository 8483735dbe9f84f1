"""Document store interface and its Firestore implementation."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Literal, Protocol

from google.cloud import firestore


@dataclass(frozen=True)
class WriteOp:
    """One write inside an atomic batch: full overwrite or delete."""

    kind: Literal["set", "delete"]
    collection: str
    doc_id: str
    data: dict[str, Any] | None = field(default=None, compare=False)


class DocumentStore(Protocol):
    """The subset of a collection-structured document store the mirror needs."""

    async def get_document(self, collection: str, doc_id: str) -> dict[str, Any] | None: ...

    async def fetch_all(self, collection: str) -> dict[str, dict[str, Any]]: ...

    async def fetch_ordered(
        self, collection: str, order_by: str, limit: int
    ) -> list[dict[str, Any]]: ...

    async def has_documents(self, collection: str) -> bool: ...

    async def commit_batch(self, ops: Sequence[WriteOp]) -> None: ...

    def new_document_id(self, collection: str) -> str: ...


class FirestoreDocumentStore:
    """DocumentStore backed by a Firestore AsyncClient."""

    def __init__(self, client: firestore.AsyncClient):
        self.client = client

    async def get_document(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        snapshot = await self.client.collection(collection).document(doc_id).get()
        if not snapshot.exists:
            return None
        return snapshot.to_dict() or {}

    async def fetch_all(self, collection: str) -> dict[str, dict[str, Any]]:
        return {
            snapshot.id: snapshot.to_dict() or {}
            async for snapshot in self.client.collection(collection).stream()
        }

    async def fetch_ordered(
        self, collection: str, order_by: str, limit: int
    ) -> list[dict[str, Any]]:
        query = (
            self.client.collection(collection)
            .order_by(order_by, direction=firestore.Query.ASCENDING)
            .limit(limit)
        )
        return [snapshot.to_dict() or {} async for snapshot in query.stream()]

    async def has_documents(self, collection: str) -> bool:
        async for _ in self.client.collection(collection).limit(1).stream():
            return True
        return False

    async def commit_batch(self, ops: Sequence[WriteOp]) -> None:
        batch = self.client.batch()
        for op in ops:
            ref = self.client.collection(op.collection).document(op.doc_id)
            if op.kind == "set":
                batch.set(ref, op.data or {}, merge=False)
            else:
                batch.delete(ref)
        await batch.commit()

    def new_document_id(self, collection: str) -> str:
        # document() without an id allocates a random one client-side
        return self.client.collection(collection).document().id
