"""
Document session port (interface).

The capability this package consumes from a document database:
a unit of work with an identity map, explicit commit and optional
include-on-load. Adapters live in ``infrastructure.persistence``.
"""

from dataclasses import dataclass
from typing import Any, List, Optional, Protocol, Type, TypeVar, runtime_checkable

from identity_docstore.domain.shared.document_query import DocumentQuery

TEntity = TypeVar("TEntity")


@dataclass(frozen=True)
class Include:
    """Load hint: fetch the document referenced by ``field`` in the same request.

    Example:
        >>> Include("user_id", IdentityUser)  # doctest: +SKIP
    """

    field: str
    entity_type: Type[Any]


@runtime_checkable
class IDocumentSession(Protocol):
    """
    Unit of work over a document store.

    Implementations must provide:
    - Identity map: one tracked instance per (collection, key)
    - Change tracking: mutations of tracked entities are flushed on commit
    - Batched commit: pending stores and deletes written as one unit
    - No implicit commit: nothing is persisted before ``save_changes``

    Not safe for concurrent use: one session per logical request.

    Example:
        >>> session = document_store.open_session()
        >>> user = IdentityUser(user_name="alice")
        >>> await session.store(user)
        >>> await session.save_changes()
    """

    @property
    def number_of_requests(self) -> int:
        """Backend round trips made by this session."""
        ...

    async def store(self, entity: Any) -> str:
        """
        Track an entity for insertion.

        Assigns ``"<collection>/<uuid>"`` when the entity has no id.

        Returns:
            The document key

        Raises:
            InvalidOperationError: If another instance is tracked under the same key
        """
        ...

    async def load(
        self,
        entity_type: Type[TEntity],
        key: str,
        include: Optional[Include] = None,
    ) -> Optional[TEntity]:
        """
        Load entity by document key.

        Returns:
            Tracked entity, or None if not found or pending deletion
        """
        ...

    async def query(
        self,
        entity_type: Type[TEntity],
        where: Optional[DocumentQuery] = None,
        limit: Optional[int] = None,
    ) -> List[TEntity]:
        """
        Query persisted documents of a collection.

        Uncommitted changes are not visible to the backend query;
        matching documents resolve through the identity map.
        """
        ...

    def get_tracked(self, entity_type: Type[TEntity], key: str) -> Optional[TEntity]:
        """Return tracked instance for key without touching the backend."""
        ...

    def is_tracked(self, entity: Any) -> bool:
        """Check if this exact instance is tracked by the session."""
        ...

    def delete(self, entity: Any) -> None:
        """
        Schedule entity deletion (applied on ``save_changes``).

        Raises:
            InvalidOperationError: If entity has no id
        """
        ...

    async def save_changes(self) -> None:
        """
        Flush pending stores, changes and deletes as one batch.

        Raises:
            Exception: Backend errors, unchanged; pending state is kept
        """
        ...

    async def close(self) -> None:
        """Release the session. Further use raises InvalidOperationError."""
        ...


@runtime_checkable
class IDocumentStore(Protocol):
    """Factory of document sessions bound to one database."""

    def open_session(self) -> IDocumentSession:
        """Open a new unit of work."""
        ...

    async def close(self) -> None:
        """Release backend resources."""
        ...
