"""
Shared fixtures for identity store tests.

Every test gets a fresh in-memory document store; user stores are
opened on separate sessions to model separate requests.
"""

from typing import Callable

import pytest

from identity_docstore.domain.user.core.entities.user import IdentityUser
from identity_docstore.infrastructure.persistence.in_memory.document_store import (
    InMemoryDocumentStore,
)
from identity_docstore.infrastructure.user.document_user_store import DocumentUserStore


# ═══════════════════════════════════════════════════════════
# DOCUMENT STORE FIXTURES
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def document_store() -> InMemoryDocumentStore:
    """Fresh in-memory document store."""
    return InMemoryDocumentStore()


@pytest.fixture
def user_store(document_store: InMemoryDocumentStore) -> DocumentUserStore[IdentityUser]:
    """User store on its own session."""
    return DocumentUserStore(document_store.open_session())


@pytest.fixture
def open_user_store(
    document_store: InMemoryDocumentStore,
) -> Callable[[], DocumentUserStore[IdentityUser]]:
    """Factory of user stores on fresh sessions (a "new request").

    Example usage:
        async def test_something(user_store, open_user_store):
            await user_store.create(user)
            other = open_user_store()
            assert await other.find_by_id(user.id) is not None
    """

    def _open() -> DocumentUserStore[IdentityUser]:
        return DocumentUserStore(document_store.open_session())

    return _open


# ═══════════════════════════════════════════════════════════
# DOMAIN MODEL FIXTURES
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def sample_user() -> IdentityUser:
    """Unsaved user without email."""
    return IdentityUser(user_name="alice")
