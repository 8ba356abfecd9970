from datetime import datetime, timezone
from typing import Callable, List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from convohub.core.exceptions import ConflictRetry
from convohub.models.conversation import (
    GROUP,
    MIN_GROUP_MEMBERS,
    ONE_TO_ONE,
    ONE_TO_ONE_NAME,
    ConversationDocument,
    make_pair_key,
)
from convohub.utils.store import store_operation


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ConversationRepository:

    def __init__(self, db: AsyncIOMotorDatabase, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._db = db
        self._clock = clock or _utcnow

    @property
    def collection(self):
        return self._db["conversations"]

    @store_operation
    async def ensure_indexes(self) -> None:
        # sparse: group documents carry no pair_key and must not collide on it
        await self.collection.create_index([("pair_key", ASCENDING)], unique=True, sparse=True)
        await self.collection.create_index([("participants", ASCENDING), ("updated_at", DESCENDING)])

    @store_operation
    async def find_by_id(self, conversation_id: ObjectId) -> Optional[ConversationDocument]:
        return await self.collection.find_one({"_id": conversation_id})

    @store_operation
    async def find_one_to_one(self, user_a: str, user_b: str) -> Optional[ConversationDocument]:
        return await self.collection.find_one({"kind": ONE_TO_ONE, "pair_key": make_pair_key(user_a, user_b)})

    @store_operation
    async def create_one_to_one(self, user_a: str, user_b: str) -> ConversationDocument:
        """Insert a one-to-one conversation, raising ConflictRetry if the pair already has one."""
        now = self._clock()
        doc: ConversationDocument = {
            "kind": ONE_TO_ONE,
            "name": ONE_TO_ONE_NAME,
            "participants": sorted([user_a, user_b]),
            "pair_key": make_pair_key(user_a, user_b),
            "latest_message_id": None,
            "created_at": now,
            "updated_at": now,
        }
        try:
            result = await self.collection.insert_one(doc)
        except DuplicateKeyError as exc:
            raise ConflictRetry() from exc
        doc["_id"] = result.inserted_id
        return doc

    @store_operation
    async def create_group(self, admin: str, name: str, participants: List[str]) -> ConversationDocument:
        now = self._clock()
        doc: ConversationDocument = {
            "kind": GROUP,
            "name": name,
            "participants": participants,
            "admin": admin,
            "latest_message_id": None,
            "created_at": now,
            "updated_at": now,
        }
        result = await self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc

    @store_operation
    async def list_for_user(self, user_id: str) -> List[ConversationDocument]:
        cursor = self.collection.find({"participants": user_id}).sort(
            [("updated_at", DESCENDING), ("_id", DESCENDING)]
        )
        return [doc async for doc in cursor]

    @store_operation
    async def rename(self, conversation_id: ObjectId, name: str) -> Optional[ConversationDocument]:
        return await self.collection.find_one_and_update(
            {"_id": conversation_id, "kind": GROUP},
            {"$set": {"name": name, "updated_at": self._clock()}},
            return_document=ReturnDocument.AFTER,
        )

    @store_operation
    async def add_participant(self, conversation_id: ObjectId, user_id: str) -> Optional[ConversationDocument]:
        """Add user_id to a group; returns None when it is absent, not a group, or already a member."""
        return await self.collection.find_one_and_update(
            {"_id": conversation_id, "kind": GROUP, "participants": {"$ne": user_id}},
            {"$addToSet": {"participants": user_id}, "$set": {"updated_at": self._clock()}},
            return_document=ReturnDocument.AFTER,
        )

    @store_operation
    async def remove_participant(self, conversation_id: ObjectId, user_id: str) -> Optional[ConversationDocument]:
        """
        Pull user_id from a group in one atomic step.

        Matches only when user_id is a current member, is not the admin, and the group
        keeps at least MIN_GROUP_MEMBERS afterwards; returns None otherwise.
        """
        return await self.collection.find_one_and_update(
            {
                "_id": conversation_id,
                "kind": GROUP,
                "admin": {"$ne": user_id},
                "$and": [
                    {"participants": user_id},
                    # groups never hold fewer than MIN_GROUP_MEMBERS, so "not exactly the floor" means "above it"
                    {"participants": {"$not": {"$size": MIN_GROUP_MEMBERS}}},
                ],
            },
            {"$pull": {"participants": user_id}, "$set": {"updated_at": self._clock()}},
            return_document=ReturnDocument.AFTER,
        )

    @store_operation
    async def set_latest_message(self, conversation_id: ObjectId, message_id: ObjectId) -> Optional[ConversationDocument]:
        return await self.collection.find_one_and_update(
            {"_id": conversation_id},
            {"$set": {"latest_message_id": message_id, "updated_at": self._clock()}},
            return_document=ReturnDocument.AFTER,
        )
