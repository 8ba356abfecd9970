from datetime import datetime
from typing import List, Literal, Optional, TypedDict

from bson import ObjectId


ConversationKind = Literal["one_to_one", "group"]

ONE_TO_ONE: ConversationKind = "one_to_one"
GROUP: ConversationKind = "group"

# placeholder name stored on one-to-one conversations; clients render the peer's name
ONE_TO_ONE_NAME = "sender"

MIN_GROUP_MEMBERS = 2


class ConversationDocument(TypedDict, total=False):
    _id: ObjectId
    kind: ConversationKind
    name: str
    participants: List[str]
    # group only
    admin: str
    # one-to-one only: "<lo>:<hi>" of the sorted pair, unique-indexed
    pair_key: str
    latest_message_id: Optional[ObjectId]
    created_at: datetime
    updated_at: datetime


def make_pair_key(user_a: str, user_b: str) -> str:
    lo, hi = sorted([user_a, user_b])
    return f"{lo}:{hi}"
