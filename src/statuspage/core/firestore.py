"""Firestore client with lazy initialization.

The client is only created when replication is enabled. Creating it does not
contact the server; connectivity problems surface on the first request and
are handled by the callers as a degraded, local-only mode.
"""

from google.cloud import firestore

from src.statuspage.core.config import Settings, get_settings
from src.statuspage.core.logging import get_logger

logger = get_logger(__name__)

_client: firestore.AsyncClient | None = None


def get_firestore_client(settings: Settings | None = None) -> firestore.AsyncClient:
    """Get the shared Firestore client, creating it on first use."""
    global _client

    if _client is not None:
        return _client

    settings = settings or get_settings()
    _client = firestore.AsyncClient(
        project=settings.resolved_project_id,
        database=settings.firestore_database,
    )
    logger.info(
        "Firestore client created",
        project=settings.resolved_project_id,
        emulator=settings.firestore_emulator_host,
    )
    return _client


async def close_firestore_client() -> None:
    """Close the Firestore client.

    Should be called during application shutdown.
    """
    global _client

    if _client is None:
        return
    result = _client.close()
    if hasattr(result, "__await__"):
        await result
    _client = None
    logger.info("Firestore client closed")


def reset_firestore_state() -> None:
    """Reset client state for testing purposes."""
    global _client
    _client = None
