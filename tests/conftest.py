import itertools
from datetime import datetime, timedelta, timezone
from typing import List

import pytest
from bson import ObjectId
from mongomock_motor import AsyncMongoMockClient

from convohub.repositories.conversation_repository import ConversationRepository
from convohub.repositories.message_repository import MessageRepository
from convohub.repositories.user_repository import UserRepository
from convohub.services.conversation_service import ConversationService
from convohub.services.view_assembler import ConversationViewAssembler


DEFAULT_PICTURE = "https://example.test/avatar.png"


class FakeClock:
    """Returns a strictly increasing UTC time, one second per call."""

    def __init__(self) -> None:
        self._start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        self._ticks = itertools.count()

    def __call__(self) -> datetime:
        return self._start + timedelta(seconds=next(self._ticks))


@pytest.fixture
def db():
    client = AsyncMongoMockClient()
    return client[f"convohub_test_{ObjectId()}"]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
async def conversation_repo(db, clock) -> ConversationRepository:
    repo = ConversationRepository(db, clock=clock)
    await repo.ensure_indexes()
    return repo


@pytest.fixture
def user_repo(db) -> UserRepository:
    return UserRepository(db, default_picture=DEFAULT_PICTURE)


@pytest.fixture
def message_repo(db) -> MessageRepository:
    return MessageRepository(db)


@pytest.fixture
def assembler(user_repo, message_repo) -> ConversationViewAssembler:
    return ConversationViewAssembler(user_repo, message_repo)


@pytest.fixture
def service(conversation_repo, message_repo, assembler) -> ConversationService:
    return ConversationService(conversation_repo, message_repo, assembler)


@pytest.fixture
async def users(db) -> List[str]:
    """Four users: alice, bob, carol with full profiles and dave with only an e-mail."""
    docs = [
        {"email": "alice@example.test", "full_name": "Alice", "picture": "https://example.test/alice.png"},
        {"email": "bob@example.test", "full_name": "Bob", "picture": "https://example.test/bob.png"},
        {"email": "carol@example.test", "full_name": "Carol", "picture": "https://example.test/carol.png"},
        {"email": "dave@example.test"},
    ]
    result = await db["users"].insert_many(docs)
    return [str(oid) for oid in result.inserted_ids]
