"""Integration tests for DocumentUserStore on MongoDB.

Requires a running MongoDB (replica set when MONGODB_USE_TRANSACTIONS
is enabled). Skipped unless IDENTITY_STORE_BACKEND=mongodb and
MONGODB_URI are set.

Run with:
    IDENTITY_STORE_BACKEND=mongodb MONGODB_URI=mongodb://localhost:27017 \
        pytest tests/integration -m integration
"""

import os
import uuid
from typing import AsyncIterator, Callable

import pytest
import pytest_asyncio

from identity_docstore.domain.user.core.entities.user import IdentityUser
from identity_docstore.domain.user.core.value_objects.claim import Claim
from identity_docstore.domain.user.core.value_objects.user_login_info import UserLoginInfo
from identity_docstore.infrastructure.persistence.mongodb import MongoDocumentStore
from identity_docstore.infrastructure.user.document_user_store import DocumentUserStore

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(
        os.getenv("IDENTITY_STORE_BACKEND") != "mongodb" or not os.getenv("MONGODB_URI"),
        reason="MongoDB integration tests require IDENTITY_STORE_BACKEND=mongodb and MONGODB_URI",
    ),
]

OpenStore = Callable[[], DocumentUserStore[IdentityUser]]


@pytest_asyncio.fixture
async def mongo_store() -> AsyncIterator[MongoDocumentStore]:
    """Throwaway database, dropped after the test."""
    store = MongoDocumentStore(database_name=f"identity_test_{uuid.uuid4().hex[:8]}")
    await store.ensure_indexes()
    try:
        yield store
    finally:
        await store.database.client.drop_database(store.database.name)
        await store.close()


@pytest.fixture
def open_store(mongo_store: MongoDocumentStore) -> OpenStore:
    def _open() -> DocumentUserStore[IdentityUser]:
        return DocumentUserStore(mongo_store.open_session())

    return _open


class TestMongoUserStore:
    """End-to-end user store behavior on MongoDB."""

    @pytest.mark.asyncio
    async def test_create_and_find(self, open_store: OpenStore) -> None:
        user = IdentityUser(user_name="alice", password_hash="hash")
        await open_store().create(user)

        reader = open_store()
        by_id = await reader.find_by_id(user.id)
        by_name = await reader.find_by_name("alice")

        assert by_id is not None
        assert by_id.password_hash == "hash"
        assert by_name is by_id
        assert await reader.find_by_name("ALICE") is None

    @pytest.mark.asyncio
    async def test_logins_and_claims_persisted_on_update(self, open_store: OpenStore) -> None:
        login = UserLoginInfo(login_provider="github", provider_key="42")
        writer = open_store()
        user = IdentityUser(user_name="alice")
        await writer.create(user)
        await writer.add_login(user, login)
        await writer.add_claim(user, Claim(type="role", value="admin"))

        assert await open_store().find_by_login(login) is None

        await writer.update(user)

        found = await open_store().find_by_login(login)
        assert found is not None
        assert found.id == user.id
        assert [c.value for c in await open_store().get_claims(found)] == ["admin"]

    @pytest.mark.asyncio
    async def test_find_by_email_single_round_trip(self, open_store: OpenStore) -> None:
        writer = open_store()
        user = IdentityUser(user_name="alice")
        await writer.create(user)
        await writer.set_email(user, "Alice@Example.com")

        reader = open_store()
        found = await reader.find_by_email("alice@example.com")

        assert found is not None
        assert found.id == user.id
        assert reader.session.number_of_requests == 1

    @pytest.mark.asyncio
    async def test_email_confirmation(self, open_store: OpenStore) -> None:
        writer = open_store()
        user = IdentityUser(user_name="alice")
        await writer.create(user)
        await writer.set_email(user, "alice@example.com")
        await writer.set_email_confirmed(user, True)

        reader = open_store()
        loaded = await reader.find_by_id(user.id)
        assert await reader.get_email_confirmed(loaded) is True

        await writer.set_email_confirmed(user, False)

        reader = open_store()
        loaded = await reader.find_by_id(user.id)
        assert await reader.get_email_confirmed(loaded) is False

    @pytest.mark.asyncio
    async def test_delete(self, open_store: OpenStore) -> None:
        writer = open_store()
        user = IdentityUser(user_name="alice")
        await writer.create(user)
        await writer.set_email(user, "alice@example.com")

        await writer.delete(user)

        reader = open_store()
        assert await reader.find_by_id(user.id) is None
        assert await reader.find_by_email("alice@example.com") is None
