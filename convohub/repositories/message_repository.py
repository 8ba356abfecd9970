from typing import Any, Dict, Iterable, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from convohub.models.message import MessageDocument
from convohub.utils.store import store_operation


class MessageRepository:

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db

    @property
    def collection(self):
        return self._db["messages"]

    @store_operation
    async def get_summaries(self, message_ids: Iterable[ObjectId]) -> Dict[str, Dict[str, Any]]:
        ids = list({oid for oid in message_ids if oid is not None})
        if not ids:
            return {}
        summaries: Dict[str, Dict[str, Any]] = {}
        cursor = self.collection.find(
            {"_id": {"$in": ids}},
            {"conversation_id": 1, "sender_id": 1, "content": 1, "timestamp": 1},
        )
        doc: MessageDocument
        async for doc in cursor:
            message_id = str(doc["_id"])
            summaries[message_id] = {
                "id": message_id,
                "conversation_id": doc.get("conversation_id"),
                "content": doc.get("content") or "",
                "sender_id": doc.get("sender_id"),
                "sent_at": doc.get("timestamp"),
            }
        return summaries

    async def get_latest_message(self, message_id: Optional[ObjectId]) -> Optional[Dict[str, Any]]:
        if message_id is None:
            return None
        summaries = await self.get_summaries([message_id])
        return summaries.get(str(message_id))
