"""Domain ports (interfaces for infrastructure adapters)."""

from identity_docstore.domain.shared.ports.document_session import (
    IDocumentSession,
    IDocumentStore,
    Include,
)

__all__ = [
    "IDocumentSession",
    "IDocumentStore",
    "Include",
]
