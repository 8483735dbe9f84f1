"""Filesystem storage rooted at the data directory."""

import os
import shutil
from pathlib import Path

from src.statuspage.core.logging import get_logger

logger = get_logger(__name__)


class FileStorage:
    """Stores each key as a file directly under ``root``."""

    def __init__(self, root: Path | str):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        if not key or key in (".", "..") or "/" in key or "\\" in key:
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.root / key

    def read(self, key: str) -> bytes | None:
        try:
            return self.path_for(key).read_bytes()
        except FileNotFoundError:
            return None

    def write(self, key: str, data: bytes) -> None:
        """Write to a sibling temp file, then rename it over the target."""
        path = self.path_for(key)
        tmp = path.with_name(f"{path.name}.tmp")
        with open(tmp, "wb") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp, path)

    def append(self, key: str, data: bytes) -> None:
        with open(self.path_for(key), "ab") as fh:
            fh.write(data)

    def exists(self, key: str) -> bool:
        return self.path_for(key).is_file()

    def copy(self, key: str, dest_key: str) -> None:
        shutil.copyfile(self.path_for(key), self.path_for(dest_key))
        logger.debug("Copied storage key", key=key, dest_key=dest_key)
