"""User store factory.

Opens a document session on the configured document store
(see ``infrastructure.persistence.factory``) and wraps it in a
DocumentUserStore.
"""

from typing import Optional, Type

from identity_docstore.domain.shared.ports.document_session import IDocumentStore
from identity_docstore.domain.user.core.entities.user import IdentityUser
from identity_docstore.domain.user.core.ports.user_stores import TUser
from identity_docstore.infrastructure.persistence.factory import get_document_store
from identity_docstore.infrastructure.user.document_user_store import DocumentUserStore


def create_user_store(
    document_store: Optional[IDocumentStore] = None,
    user_type: Type[TUser] = IdentityUser,  # type: ignore[assignment]
) -> DocumentUserStore[TUser]:
    """Create a user store bound to a fresh session.

    Args:
        document_store: Store to open the session on (defaults to the singleton)
        user_type: User aggregate class

    Returns:
        DocumentUserStore owning its session (closed with the store)

    Examples:
        >>> async with create_user_store() as store:
        ...     await store.create(IdentityUser(user_name="alice"))
    """
    store = document_store or get_document_store()
    return DocumentUserStore(store.open_session(), user_type=user_type, dispose_session=True)
