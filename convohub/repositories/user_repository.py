from typing import Any, Dict, Iterable

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from convohub.models.user import UserDocument
from convohub.utils.store import store_operation


PROFILE_FIELDS = {"email": 1, "full_name": 1, "picture": 1}


class UserRepository:

    def __init__(self, db: AsyncIOMotorDatabase, default_picture: str = "") -> None:
        self._collection = db.get_collection("users")
        self._default_picture = default_picture

    @store_operation
    async def get_profiles(self, user_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        """Resolve user ids to {id, name, picture, email}; ids with no user document are left out."""
        oids = [ObjectId(uid) for uid in set(user_ids) if ObjectId.is_valid(uid)]
        if not oids:
            return {}
        profiles: Dict[str, Dict[str, Any]] = {}
        async for doc in self._collection.find({"_id": {"$in": oids}}, PROFILE_FIELDS):
            user_id = str(doc["_id"])
            profiles[user_id] = self._to_profile(user_id, doc)
        return profiles

    def _to_profile(self, user_id: str, doc: UserDocument) -> Dict[str, Any]:
        email = doc.get("email") or ""
        name = doc.get("full_name") or email.split("@", 1)[0]
        return {
            "id": user_id,
            "name": name,
            "picture": doc.get("picture") or self._default_picture,
            "email": email,
        }
