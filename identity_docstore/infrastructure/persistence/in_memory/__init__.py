"""In-memory persistence implementations."""

from identity_docstore.infrastructure.persistence.in_memory.document_store import (
    InMemoryDocumentSession,
    InMemoryDocumentStore,
)

__all__ = [
    "InMemoryDocumentSession",
    "InMemoryDocumentStore",
]
