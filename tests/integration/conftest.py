"""Integration test fixtures for the HTTP application.

The app is built with create_app() and given a Runtime directly, so tests
control the data directory and the remote store without running the lifespan.
"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from src.statuspage.bootstrap import Runtime, build_runtime, shutdown_runtime
from src.statuspage.core.config import Settings
from src.statuspage.core.firestore import reset_firestore_state
from src.statuspage.main import create_app

ADMIN_KEY = "test-admin-key"


@pytest.fixture(autouse=True)
def _reset_firestore_between_tests():
    reset_firestore_state()
    yield
    reset_firestore_state()


@pytest.fixture
def settings(data_dir: Path) -> Settings:
    """Local-only settings rooted at the per-test data directory."""
    return Settings(data_dir=data_dir, firestore_sync_enabled=False, admin_api_key=ADMIN_KEY)


@pytest.fixture
async def runtime(settings: Settings) -> AsyncGenerator[Runtime]:
    rt = await build_runtime(settings)
    yield rt
    await shutdown_runtime(rt, grace_period=1)


@pytest.fixture
async def client(runtime: Runtime) -> AsyncGenerator[AsyncClient]:
    """HTTP client for an app serving ``runtime``."""
    app = create_app()
    app.state.runtime = runtime
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"X-Admin-Key": ADMIN_KEY}
