"""Base document session with reusable unit-of-work patterns.

Provides the backend-independent half of every document session:
- Identity map (one instance per collection + key)
- Change tracking against the snapshot taken at load / commit
- Pending stores and deletes, flushed as one batch
- Request counting and logging

Concrete sessions only implement the backend round trips
(``_fetch``, ``_fetch_where``, ``_flush``, optionally ``_fetch_with_include``).
"""

import uuid
from abc import ABC, abstractmethod
from copy import deepcopy
from typing import Any, Dict, List, Optional, Set, Tuple, Type, TypeVar

import structlog

from identity_docstore.domain.shared.document_query import DocumentQuery, MatchAll
from identity_docstore.domain.shared.errors import InvalidArgumentError, InvalidOperationError
from identity_docstore.domain.shared.ports.document_session import Include
from identity_docstore.infrastructure.persistence.document_mapping import (
    ID_FIELD,
    collection_name_for,
    from_document,
    to_document,
)

TEntity = TypeVar("TEntity")

# (collection, key)
DocumentRef = Tuple[str, str]
# (collection, key, document)
PendingUpsert = Tuple[str, str, Dict[str, Any]]

logger = structlog.get_logger(__name__)


class DocumentSessionBase(ABC):
    """
    Abstract base class for document sessions.

    Subclasses must implement:
    - _fetch(): load one document by key
    - _fetch_where(): load documents matching a query
    - _flush(): write a batch of upserts and deletes atomically
      (or as close to atomically as the backend allows)

    Example:
        class InMemoryDocumentSession(DocumentSessionBase):
            async def _fetch(self, collection, key):
                ...
    """

    def __init__(self) -> None:
        self._entities: Dict[DocumentRef, Any] = {}
        self._snapshots: Dict[DocumentRef, Dict[str, Any]] = {}
        self._new: Set[DocumentRef] = set()
        self._deleted: Set[DocumentRef] = set()
        self._requests = 0
        self._closed = False

    # ============================================================
    # Backend round trips (must be implemented)
    # ============================================================

    @abstractmethod
    async def _fetch(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        """Load a single document, None if missing."""
        pass

    @abstractmethod
    async def _fetch_where(
        self, collection: str, query: DocumentQuery, limit: Optional[int]
    ) -> List[Dict[str, Any]]:
        """Load persisted documents matching query."""
        pass

    @abstractmethod
    async def _flush(self, upserts: List[PendingUpsert], deletes: List[DocumentRef]) -> None:
        """Write upserts and deletes as one batch."""
        pass

    async def _fetch_with_include(
        self, collection: str, key: str, include_collection: str, include_field: str
    ) -> Tuple[Optional[Dict[str, Any]], Optional[Dict[str, Any]]]:
        """
        Load a document plus the document its ``include_field`` references.

        Default: two fetches. Backends able to join override this to
        use a single round trip.
        """
        document = await self._fetch(collection, key)
        if document is None:
            return None, None
        reference = document.get(include_field)
        if reference is None:
            return document, None
        self._requests += 1
        return document, await self._fetch(include_collection, reference)

    async def _release(self) -> None:
        """Release backend resources held by the session."""
        pass

    # ============================================================
    # Session API
    # ============================================================

    @property
    def number_of_requests(self) -> int:
        return self._requests

    async def store(self, entity: Any) -> str:
        self._ensure_open()
        if entity is None:
            raise InvalidArgumentError("entity")

        collection = collection_name_for(type(entity))
        if entity.id is None:
            entity.id = f"{collection}/{uuid.uuid4()}"

        ref = (collection, entity.id)
        tracked = self._entities.get(ref)
        if tracked is not None and tracked is not entity:
            raise InvalidOperationError(
                f"Attempted to associate a different object with key '{entity.id}'"
            )

        if tracked is None:
            self._entities[ref] = entity
            if ref not in self._snapshots:
                self._new.add(ref)
        self._deleted.discard(ref)

        logger.debug("document_session.stored", collection=collection, key=entity.id)
        return str(entity.id)

    async def load(
        self,
        entity_type: Type[TEntity],
        key: str,
        include: Optional[Include] = None,
    ) -> Optional[TEntity]:
        self._ensure_open()
        collection = collection_name_for(entity_type)
        ref = (collection, key)

        if ref in self._deleted:
            return None
        if ref in self._entities:
            return self._entities[ref]  # type: ignore[no-any-return]

        self._requests += 1
        if include is not None:
            include_collection = collection_name_for(include.entity_type)
            document, included = await self._fetch_with_include(
                collection, key, include_collection, include.field
            )
            if included is not None and (include_collection, included[ID_FIELD]) not in self._deleted:
                self._track_document(include.entity_type, included)
        else:
            document = await self._fetch(collection, key)

        if document is None:
            return None
        return self._track_document(entity_type, document)

    async def query(
        self,
        entity_type: Type[TEntity],
        where: Optional[DocumentQuery] = None,
        limit: Optional[int] = None,
    ) -> List[TEntity]:
        self._ensure_open()
        collection = collection_name_for(entity_type)
        if limit is not None and limit <= 0:
            return []

        # Documents pending deletion are still persisted: over-fetch to fill the limit
        backend_limit = limit
        if limit is not None:
            backend_limit = limit + sum(1 for ref in self._deleted if ref[0] == collection)

        self._requests += 1
        documents = await self._fetch_where(collection, where or MatchAll(), backend_limit)

        results: List[TEntity] = []
        for document in documents:
            if (collection, document[ID_FIELD]) in self._deleted:
                continue
            results.append(self._track_document(entity_type, document))
        return results if limit is None else results[:limit]

    def get_tracked(self, entity_type: Type[TEntity], key: str) -> Optional[TEntity]:
        self._ensure_open()
        return self._entities.get((collection_name_for(entity_type), key))

    def is_tracked(self, entity: Any) -> bool:
        if entity is None or getattr(entity, "id", None) is None:
            return False
        ref = (collection_name_for(type(entity)), entity.id)
        return self._entities.get(ref) is entity

    def delete(self, entity: Any) -> None:
        self._ensure_open()
        if entity is None:
            raise InvalidArgumentError("entity")
        if entity.id is None:
            raise InvalidOperationError("Cannot delete an entity without id")

        ref = (collection_name_for(type(entity)), entity.id)
        self._entities.pop(ref, None)
        self._new.discard(ref)
        self._deleted.add(ref)

    async def save_changes(self) -> None:
        self._ensure_open()

        upserts: List[PendingUpsert] = []
        for ref, entity in self._entities.items():
            document = to_document(entity)
            if ref in self._new or document != self._snapshots.get(ref):
                upserts.append((ref[0], ref[1], document))
        deletes = sorted(self._deleted)

        if not upserts and not deletes:
            logger.debug("document_session.no_changes")
            return

        self._requests += 1
        await self._flush(upserts, deletes)

        for collection, key, document in upserts:
            self._snapshots[(collection, key)] = deepcopy(document)
        for ref in deletes:
            self._snapshots.pop(ref, None)
        self._new.clear()
        self._deleted.clear()

        logger.info("document_session.saved", upserts=len(upserts), deletes=len(deletes))

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._entities.clear()
        self._snapshots.clear()
        self._new.clear()
        self._deleted.clear()
        await self._release()

    async def __aenter__(self) -> "DocumentSessionBase":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # ============================================================
    # Internals
    # ============================================================

    def _ensure_open(self) -> None:
        if self._closed:
            raise InvalidOperationError("Document session is closed")

    def _track_document(self, entity_type: Type[TEntity], document: Dict[str, Any]) -> TEntity:
        ref = (collection_name_for(entity_type), document[ID_FIELD])
        tracked = self._entities.get(ref)
        if tracked is not None:
            return tracked  # type: ignore[no-any-return]

        entity = from_document(entity_type, document)
        self._entities[ref] = entity
        self._snapshots[ref] = deepcopy(to_document(entity))
        return entity
