"""Root test fixtures shared across all test types.

Unit tests use these directly; HTTP tests add an app and client in
tests/integration/conftest.py.
"""

import os

# Set before any app imports so Settings never enables replication from the
# developer's environment and password hashing stays fast.
os.environ.setdefault("APP_ENV", "testing")
os.environ["FIRESTORE_SYNC_ENABLED"] = "false"
os.environ.setdefault("ARGON2_TIME_COST", "1")
os.environ.setdefault("ARGON2_MEMORY_COST", "1024")

# ruff: noqa: E402 - Imports must be after env var setup
from pathlib import Path

import pytest
import structlog
from structlog.testing import CapturingLogger

from src.statuspage.core.config import get_settings
from src.statuspage.core.logging import clear_request_context
from src.statuspage.remote.mirror import RemoteMirror
from src.statuspage.repositories.local_store import LocalStore
from src.statuspage.services.snapshot_service import SnapshotProjector
from src.statuspage.storage.file import FileStorage
from tests.fakes import InMemoryDocumentStore

# Clear settings cache to ensure test environment variables are picked up
get_settings.cache_clear()


# --- Local storage fixtures ---


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Empty data directory for one test."""
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture
def storage(data_dir: Path) -> FileStorage:
    return FileStorage(data_dir)


@pytest.fixture
def store(storage: FileStorage) -> LocalStore:
    """LocalStore loaded with the built-in dataset."""
    local_store = LocalStore(storage)
    local_store.load()
    return local_store


# --- Remote store fixtures ---


@pytest.fixture
def document_store() -> InMemoryDocumentStore:
    """In-memory stand-in for Firestore.

    Records every committed batch in ``commits`` and can be told to fail
    reads or writes to exercise degraded paths.
    """
    return InMemoryDocumentStore()


@pytest.fixture
def mirror(document_store: InMemoryDocumentStore) -> RemoteMirror:
    return RemoteMirror(document_store, SnapshotProjector(), batch_size=400)


# --- Logging fixtures ---


@pytest.fixture
def capturing_logger():
    """Route structlog through a CapturingLogger for the duration of a test."""
    cap_logger = CapturingLogger()
    old_config = structlog.get_config()

    structlog.configure(
        processors=[structlog.contextvars.merge_contextvars],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=lambda *args, **kwargs: cap_logger,
        cache_logger_on_first_use=False,
    )

    clear_request_context()
    yield cap_logger
    clear_request_context()
    structlog.configure(**old_config)
