from typing import Optional, TypedDict

from bson import ObjectId


class UserDocument(TypedDict, total=False):

    _id: ObjectId
    email: str
    full_name: Optional[str]
    picture: Optional[str]
