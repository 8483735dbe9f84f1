"""Key/bytes storage interface used by the local store and the audit log."""

from typing import Protocol


class Storage(Protocol):
    """Minimal blob storage addressed by key.

    Implementations must make ``write`` atomic: a reader never observes a
    partially written value.
    """

    def read(self, key: str) -> bytes | None: ...

    def write(self, key: str, data: bytes) -> None: ...

    def append(self, key: str, data: bytes) -> None: ...

    def exists(self, key: str) -> bool: ...

    def copy(self, key: str, dest_key: str) -> None: ...
