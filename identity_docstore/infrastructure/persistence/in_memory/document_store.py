"""In-memory document store implementation.

Provides an in-memory implementation of the IDocumentStore port for
tests and local development. Committed documents are kept as deep
copies, so uncommitted changes made through one session are never
visible to another.
"""

from copy import deepcopy
from typing import Any, Dict, List, Optional, Tuple

from identity_docstore.domain.shared.document_query import DocumentQuery
from identity_docstore.infrastructure.persistence.unit_of_work import (
    DocumentRef,
    DocumentSessionBase,
    PendingUpsert,
)


class InMemoryDocumentStore:
    """
    In-memory implementation of IDocumentStore port.

    Thread safety: NOT thread-safe (use locks if needed)
    Persistence: Data lost on process restart (in-memory only)

    Example:
        >>> store = InMemoryDocumentStore()
        >>> session = store.open_session()
        >>> await session.store(IdentityUser(user_name="alice"))
        >>> await session.save_changes()
        >>> store.count("users")
        1
    """

    def __init__(self) -> None:
        """Initialize store with empty collections."""
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def open_session(self) -> "InMemoryDocumentSession":
        return InMemoryDocumentSession(self)

    def documents(self, collection: str) -> Dict[str, Dict[str, Any]]:
        """
        Get a copy of the committed documents of a collection.

        Useful for test assertions.
        """
        return deepcopy(self._collections.get(collection, {}))

    def count(self, collection: str) -> int:
        return len(self._collections.get(collection, {}))

    def clear(self) -> None:
        """Clear all collections. Useful for test cleanup."""
        self._collections.clear()

    async def close(self) -> None:
        """Nothing to release."""
        pass

    def _get(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        document = self._collections.get(collection, {}).get(key)
        return deepcopy(document) if document is not None else None

    def _find(
        self, collection: str, query: DocumentQuery, limit: Optional[int]
    ) -> List[Dict[str, Any]]:
        matches = [
            deepcopy(document)
            for document in self._collections.get(collection, {}).values()
            if query.matches(document)
        ]
        return matches[:limit] if limit is not None else matches

    def _apply(self, upserts: List[PendingUpsert], deletes: List[DocumentRef]) -> None:
        # Copy first so a bad document cannot leave a half-applied batch
        copies = [(collection, key, deepcopy(document)) for collection, key, document in upserts]
        for collection, key, document in copies:
            self._collections.setdefault(collection, {})[key] = document
        for collection, key in deletes:
            self._collections.get(collection, {}).pop(key, None)


class InMemoryDocumentSession(DocumentSessionBase):
    """Document session over an InMemoryDocumentStore."""

    def __init__(self, store: InMemoryDocumentStore) -> None:
        super().__init__()
        self._store = store

    async def _fetch(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        return self._store._get(collection, key)

    async def _fetch_with_include(
        self, collection: str, key: str, include_collection: str, include_field: str
    ) -> Tuple[Optional[Dict[str, Any]], Optional[Dict[str, Any]]]:
        document = self._store._get(collection, key)
        if document is None or document.get(include_field) is None:
            return document, None
        return document, self._store._get(include_collection, document[include_field])

    async def _fetch_where(
        self, collection: str, query: DocumentQuery, limit: Optional[int]
    ) -> List[Dict[str, Any]]:
        return self._store._find(collection, query, limit)

    async def _flush(self, upserts: List[PendingUpsert], deletes: List[DocumentRef]) -> None:
        self._store._apply(upserts, deletes)
