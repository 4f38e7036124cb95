"""Document Store Factory for Persistence Layer.

Environment-based document store selection.
Strategy:
- .env (runtime): IDENTITY_STORE_BACKEND=mongodb (production persistence)
- tests: IDENTITY_STORE_BACKEND=inmemory (fast, isolated)
- Default: inmemory (safe fallback if env vars not set)

Usage:
    from identity_docstore.infrastructure.persistence.factory import (
        create_document_store,
        get_document_store,
    )

    store = create_document_store()  # inmemory or mongodb based on env
    store = get_document_store()     # Singleton instance
"""

from typing import Optional

import structlog

from identity_docstore.domain.shared.ports.document_session import IDocumentStore
from identity_docstore.infrastructure.config import SUPPORTED_BACKENDS, get_identity_store_backend
from identity_docstore.infrastructure.persistence.in_memory.document_store import (
    InMemoryDocumentStore,
)
from identity_docstore.infrastructure.persistence.mongodb.document_store import MongoDocumentStore

logger = structlog.get_logger(__name__)


def create_document_store() -> IDocumentStore:
    """Create document store based on IDENTITY_STORE_BACKEND env var.

    Values:
        - "inmemory": In-memory store (default, fast, transient)
        - "mongodb": MongoDB store (persistent, requires MONGODB_URI)

    Returns:
        IDocumentStore: Store instance

    Raises:
        ValueError: If the backend is unknown, or mongodb selected without MONGODB_URI
    """
    backend = get_identity_store_backend()

    if backend == "mongodb":
        logger.info("document_store.created", backend=backend)
        return MongoDocumentStore()

    if backend == "inmemory":
        logger.info("document_store.created", backend=backend)
        return InMemoryDocumentStore()

    raise ValueError(
        f"Invalid IDENTITY_STORE_BACKEND value: {backend}. "
        f"Expected one of: {', '.join(SUPPORTED_BACKENDS)}"
    )


# Singleton instance
_document_store: Optional[IDocumentStore] = None


def get_document_store() -> IDocumentStore:
    """Get singleton document store instance."""
    global _document_store

    if _document_store is None:
        _document_store = create_document_store()

    return _document_store


def reset_document_store() -> None:
    """Reset the singleton (for testing purposes)."""
    global _document_store
    _document_store = None
