"""Unit tests for the user store factory."""

from dataclasses import dataclass
from typing import Iterator

import pytest

from identity_docstore.domain.user.core.entities.user import IdentityUser
from identity_docstore.infrastructure.persistence.factory import reset_document_store
from identity_docstore.infrastructure.persistence.in_memory import InMemoryDocumentStore
from identity_docstore.infrastructure.user.document_user_store import DocumentUserStore
from identity_docstore.infrastructure.user.factory import create_user_store


@dataclass(eq=False)
class StaffUser(IdentityUser):
    department: str = ""


@pytest.fixture(autouse=True)
def inmemory_backend(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setenv("IDENTITY_STORE_BACKEND", "inmemory")
    reset_document_store()
    yield
    reset_document_store()


class TestCreateUserStore:
    """Test create_user_store()."""

    def test_each_store_gets_own_session(self) -> None:
        store = InMemoryDocumentStore()

        first = create_user_store(store)
        second = create_user_store(store)

        assert isinstance(first, DocumentUserStore)
        assert first.session is not second.session

    @pytest.mark.asyncio
    async def test_stores_share_default_document_store(self) -> None:
        async with create_user_store() as writer:
            user = IdentityUser(user_name="alice")
            await writer.create(user)

        async with create_user_store() as reader:
            found = await reader.find_by_id(user.id)

        assert found is not None
        assert found.user_name == "alice"

    @pytest.mark.asyncio
    async def test_custom_user_type(self) -> None:
        store = InMemoryDocumentStore()
        async with create_user_store(store, StaffUser) as writer:
            await writer.create(StaffUser(user_name="bob", department="ops"))

        async with create_user_store(store, StaffUser) as reader:
            found = await reader.find_by_name("bob")

        assert isinstance(found, StaffUser)
        assert found.department == "ops"
