from typing import Optional

from bson import ObjectId

from convohub.core.exceptions import InvalidArgument


def to_object_id(value: Optional[str], field: str = "chatId") -> ObjectId:
    if isinstance(value, ObjectId):
        return value
    if not value or not ObjectId.is_valid(value):
        raise InvalidArgument(f"{field} is missing or malformed")
    return ObjectId(value)


def normalize_user_id(value: Optional[str]) -> str:
    """Canonical form of a user id: ObjectId hex is lowercased, anything else is only stripped."""
    user_id = str(value or "").strip()
    if ObjectId.is_valid(user_id):
        return str(ObjectId(user_id))
    return user_id


def clean_user_id(value: Optional[str], field: str = "userId") -> str:
    user_id = normalize_user_id(value)
    if not user_id:
        raise InvalidArgument(f"{field} param not sent with request")
    return user_id
