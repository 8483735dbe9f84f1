"""The single in-memory authoritative dataset and its local JSON file."""

import json
import time
from typing import Any

from src.statuspage.core.exceptions import MalformedLocalFileError
from src.statuspage.core.logging import get_logger
from src.statuspage.core.migrations import FALLBACK_NEXT_ID, run_migrations
from src.statuspage.core.security import hash_password
from src.statuspage.models.base import utc_now_iso
from src.statuspage.models.enums import UserRole
from src.statuspage.repositories.defaults import default_data
from src.statuspage.storage.base import Storage

logger = get_logger(__name__)


def parse_dataset(raw: bytes) -> dict[str, Any]:
    """Decode the data file.

    Raises:
        MalformedLocalFileError: If the bytes are not a JSON object.
    """
    try:
        parsed = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedLocalFileError(str(e)) from e
    if not isinstance(parsed, dict):
        raise MalformedLocalFileError(f"Expected a JSON object, got {type(parsed).__name__}")
    return parsed


def serialize_dataset(data: dict[str, Any]) -> bytes:
    return json.dumps(data, indent=2, ensure_ascii=False).encode("utf-8")


class LocalStore:
    """Owns the dataset for the lifetime of the process.

    Route handlers mutate ``data`` in place and then call ``save()``. The
    storage may be swapped for a replicating decorator after construction.
    """

    def __init__(
        self,
        storage: Storage,
        data_key: str = "data.json",
        initial_admin_email: str | None = None,
        initial_admin_password: str | None = None,
    ):
        self.storage = storage
        self.data_key = data_key
        self.initial_admin_email = initial_admin_email
        self.initial_admin_password = initial_admin_password
        self._data: dict[str, Any] | None = None

    @property
    def data(self) -> dict[str, Any]:
        if self._data is None:
            raise RuntimeError("LocalStore.load() must be called before accessing data")
        return self._data

    @property
    def is_loaded(self) -> bool:
        return self._data is not None

    def load(self) -> dict[str, Any]:
        """Read, migrate and normalize the data file.

        A missing file yields the built-in dataset. An unreadable file is
        copied aside with a timestamp suffix and also replaced by the built-in
        dataset, so startup never fails because of the local cache.
        """
        raw = self.storage.read(self.data_key)
        data: dict[str, Any] | None = None
        if raw is not None:
            try:
                data = parse_dataset(raw)
            except MalformedLocalFileError as e:
                logger.error("Failed to parse local data file, starting with defaults", error=str(e))
                self._backup_corrupt_file()

        if data is None:
            data = default_data()

        run_migrations(data)
        self._data = data

        if self._ensure_initial_admin():
            self.save()
        if not data["users"]:
            logger.warning(
                "No admin users configured. Set INITIAL_ADMIN_EMAIL and "
                "INITIAL_ADMIN_PASSWORD before first login."
            )
        logger.info(
            "Local dataset loaded",
            projects=len(data["projects"]),
            users=len(data["users"]),
            next_id=data["nextId"],
        )
        return data

    def _backup_corrupt_file(self) -> None:
        backup_key = f"{self.data_key}.corrupt.{int(time.time() * 1000)}"
        try:
            self.storage.copy(self.data_key, backup_key)
            logger.error("Corrupt data file backed up", backup=backup_key)
        except OSError as e:
            logger.error("Could not back up corrupt data file", error=str(e))

    def _ensure_initial_admin(self) -> bool:
        email = (self.initial_admin_email or "").strip().lower()
        if not email or not self.initial_admin_password:
            return False
        users = self.data["users"]
        if any(isinstance(u, dict) and u.get("username") == email for u in users):
            return False
        users.append(
            {
                "id": self.next_id(),
                "username": email,
                "passwordHash": hash_password(self.initial_admin_password),
                "role": UserRole.ADMIN.value,
                "createdAt": utc_now_iso(),
            }
        )
        logger.info("Seeded initial admin user", username=email)
        return True

    def save(self) -> None:
        """Write the whole dataset atomically (temp file + rename)."""
        try:
            self.storage.write(self.data_key, serialize_dataset(self.data))
        except OSError as e:
            logger.error("Failed to save local data file", error=str(e))
            raise

    def next_id(self) -> int:
        """Hand out the next id and advance the counter. Call ``save()`` afterwards."""
        issued = self.data.get("nextId") or FALLBACK_NEXT_ID
        self.data["nextId"] = issued + 1
        return issued

    # --- Accessors ----------------------------------------------------------

    @property
    def projects(self) -> list[dict[str, Any]]:
        return self.data["projects"]

    def get_project_by_id(self, project_id: int | str) -> dict[str, Any] | None:
        try:
            wanted = int(project_id)
        except (TypeError, ValueError):
            return None
        return next((p for p in self.projects if p.get("id") == wanted), None)

    def get_project_by_slug(self, slug: str) -> dict[str, Any] | None:
        return next((p for p in self.projects if p.get("slug") == slug), None)
