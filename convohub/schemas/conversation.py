import json
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, field_validator

from convohub.models.conversation import ConversationKind


class ProfileView(BaseModel):

    id: str
    name: str
    picture: Optional[str] = None
    email: str


class MessageSummaryView(BaseModel):

    id: str
    content: str
    sender: ProfileView
    sent_at: Optional[datetime] = None


class ConversationView(BaseModel):

    id: str
    kind: ConversationKind
    name: str
    is_group_chat: bool
    participants: List[ProfileView]
    admin: Optional[ProfileView] = None
    latest_message: Optional[MessageSummaryView] = None
    created_at: datetime
    updated_at: datetime


class AccessChatRequest(BaseModel):

    user_id: Optional[str] = None


class CreateGroupRequest(BaseModel):

    name: Optional[str] = None
    users: Optional[List[str]] = None

    @field_validator("users", mode="before")
    @classmethod
    def parse_users(cls, value: Any) -> Any:
        # web clients send the member list JSON-encoded in a form field
        if isinstance(value, str):
            return json.loads(value)
        return value


class RenameGroupRequest(BaseModel):

    chat_id: Optional[str] = None
    chat_name: Optional[str] = None


class GroupMemberRequest(BaseModel):

    chat_id: Optional[str] = None
    user_id: Optional[str] = None
