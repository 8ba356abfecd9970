from typing import Any, Dict, List, Optional, Sequence, Set

from loguru import logger

from convohub.models.conversation import GROUP
from convohub.repositories.message_repository import MessageRepository
from convohub.repositories.user_repository import UserRepository
from convohub.schemas.conversation import ConversationView, MessageSummaryView, ProfileView


UNKNOWN_USER_NAME = "Unknown user"


class ConversationViewAssembler:
    """
    Turns stored conversation documents into ConversationView objects.

    Resolution runs in two batched stages over the whole input: latest messages
    first, then every profile the batch references (participants, admins and
    message senders). A single conversation goes through the same path as a list.
    """

    def __init__(self, user_repo: UserRepository, message_repo: MessageRepository) -> None:
        self._user_repo = user_repo
        self._message_repo = message_repo

    async def assemble(self, conversation: Dict[str, Any]) -> ConversationView:
        views = await self.assemble_many([conversation])
        return views[0]

    async def assemble_many(self, conversations: Sequence[Dict[str, Any]]) -> List[ConversationView]:
        if not conversations:
            return []

        messages = await self._message_repo.get_summaries(
            c["latest_message_id"] for c in conversations if c.get("latest_message_id")
        )

        user_ids: Set[str] = set()
        for convo in conversations:
            user_ids.update(convo.get("participants", []))
            if convo.get("admin"):
                user_ids.add(convo["admin"])
        for message in messages.values():
            if message.get("sender_id"):
                user_ids.add(message["sender_id"])
        profiles = await self._user_repo.get_profiles(user_ids)

        return [self._build(convo, messages, profiles) for convo in conversations]

    def _build(
        self,
        convo: Dict[str, Any],
        messages: Dict[str, Dict[str, Any]],
        profiles: Dict[str, Dict[str, Any]],
    ) -> ConversationView:
        admin_id = convo.get("admin")
        return ConversationView(
            id=str(convo["_id"]),
            kind=convo["kind"],
            name=convo.get("name", ""),
            is_group_chat=convo["kind"] == GROUP,
            participants=[self._profile(uid, profiles) for uid in convo.get("participants", [])],
            admin=self._profile(admin_id, profiles) if admin_id else None,
            latest_message=self._latest_message(convo, messages, profiles),
            created_at=convo["created_at"],
            updated_at=convo["updated_at"],
        )

    def _latest_message(
        self,
        convo: Dict[str, Any],
        messages: Dict[str, Dict[str, Any]],
        profiles: Dict[str, Dict[str, Any]],
    ) -> Optional[MessageSummaryView]:
        ref = convo.get("latest_message_id")
        if not ref:
            return None
        message = messages.get(str(ref))
        if message is None:
            logger.warning("Conversation {} references missing message {}", convo["_id"], ref)
            return None
        return MessageSummaryView(
            id=message["id"],
            content=message["content"],
            sender=self._profile(message.get("sender_id") or "", profiles),
            sent_at=message.get("sent_at"),
        )

    def _profile(self, user_id: str, profiles: Dict[str, Dict[str, Any]]) -> ProfileView:
        profile = profiles.get(user_id)
        if profile is None:
            logger.warning("No profile found for user {}", user_id)
            return ProfileView(id=user_id, name=UNKNOWN_USER_NAME, picture=None, email="")
        return ProfileView(**profile)
