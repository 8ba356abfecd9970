from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from loguru import logger

from convohub.core.exceptions import ConflictRetry, InvalidArgument, NotFound, StoreUnavailable
from convohub.models.conversation import GROUP, MIN_GROUP_MEMBERS
from convohub.repositories.conversation_repository import ConversationRepository
from convohub.repositories.message_repository import MessageRepository
from convohub.schemas.conversation import ConversationView
from convohub.services.view_assembler import ConversationViewAssembler
from convohub.utils.ids import clean_user_id, normalize_user_id, to_object_id


class ConversationService:
    """Membership engine for one-to-one and group conversations."""

    def __init__(
        self,
        conversation_repo: ConversationRepository,
        message_repo: MessageRepository,
        assembler: ConversationViewAssembler,
    ) -> None:
        self._conversation_repo = conversation_repo
        self._message_repo = message_repo
        self._assembler = assembler

    async def access_one_to_one(self, requester: str, other_user: Optional[str]) -> ConversationView:
        """Return the one-to-one conversation between the two users, creating it on first access."""
        requester = clean_user_id(requester, "requester")
        other_user = clean_user_id(other_user)
        if other_user == requester:
            raise InvalidArgument("Cannot start a chat with yourself")

        convo = await self._conversation_repo.find_one_to_one(requester, other_user)
        if convo is None:
            convo = await self._create_one_to_one(requester, other_user)
        return await self._assembler.assemble(convo)

    async def _create_one_to_one(self, user_a: str, user_b: str) -> Dict[str, Any]:
        try:
            convo = await self._conversation_repo.create_one_to_one(user_a, user_b)
        except ConflictRetry:
            logger.warning("Concurrent create for pair {}/{}; returning the stored conversation", user_a, user_b)
            convo = await self._conversation_repo.find_one_to_one(user_a, user_b)
            if convo is None:
                raise StoreUnavailable("One-to-one conversation missing after a create conflict")
            return convo
        logger.info("Created one-to-one conversation {} for {} and {}", convo["_id"], user_a, user_b)
        return convo

    async def list_conversations(self, user_id: str) -> List[ConversationView]:
        user_id = clean_user_id(user_id)
        conversations = await self._conversation_repo.list_for_user(user_id)
        return await self._assembler.assemble_many(conversations)

    async def get_conversation(self, chat_id: str) -> ConversationView:
        convo = await self._conversation_repo.find_by_id(to_object_id(chat_id))
        if convo is None:
            raise NotFound()
        return await self._assembler.assemble(convo)

    async def create_group(self, creator: str, name: Optional[str], member_ids: Optional[Iterable[str]]) -> ConversationView:
        creator = clean_user_id(creator, "creator")
        if not name or not name.strip() or member_ids is None:
            raise InvalidArgument("Please fill all the fields")

        members: List[str] = []
        for member in member_ids:
            member = normalize_user_id(member)
            if member and member != creator and member not in members:
                members.append(member)
        if len(members) < MIN_GROUP_MEMBERS:
            raise InvalidArgument("More than 2 users are required to form a group chat")

        convo = await self._conversation_repo.create_group(
            admin=creator,
            name=name.strip(),
            participants=[creator, *members],
        )
        logger.info("Group {} created by {} with {} participants", convo["_id"], creator, len(members) + 1)
        return await self._assembler.assemble(convo)

    async def rename_group(self, chat_id: str, new_name: Optional[str]) -> ConversationView:
        if not new_name or not new_name.strip():
            raise InvalidArgument("Group name cannot be empty")
        oid = to_object_id(chat_id)

        convo = await self._conversation_repo.rename(oid, new_name.strip())
        if convo is None:
            await self._require_group(oid)
            raise StoreUnavailable("Group rename was not applied")
        logger.info("Group {} renamed", oid)
        return await self._assembler.assemble(convo)

    async def add_member(self, chat_id: str, user_id: Optional[str]) -> ConversationView:
        oid = to_object_id(chat_id)
        user_id = clean_user_id(user_id)

        convo = await self._conversation_repo.add_participant(oid, user_id)
        if convo is None:
            # already a member: nothing to change
            convo = await self._require_group(oid)
        else:
            logger.info("Added {} to group {}", user_id, oid)
        return await self._assembler.assemble(convo)

    async def remove_member(self, chat_id: str, user_id: Optional[str]) -> ConversationView:
        oid = to_object_id(chat_id)
        user_id = clean_user_id(user_id)

        # the second attempt covers a membership change between the failed update and the re-read
        for _ in range(2):
            convo = await self._conversation_repo.remove_participant(oid, user_id)
            if convo is not None:
                logger.info("Removed {} from group {}", user_id, oid)
                return await self._assembler.assemble(convo)

            current = await self._require_group(oid)
            if user_id not in current.get("participants", []):
                return await self._assembler.assemble(current)
            if current.get("admin") == user_id:
                raise InvalidArgument("The group admin cannot be removed")
            if len(current["participants"]) <= MIN_GROUP_MEMBERS:
                raise InvalidArgument(f"A group needs at least {MIN_GROUP_MEMBERS} members")
        raise StoreUnavailable("Group membership changed concurrently; try again")

    async def record_latest_message(self, chat_id: str, message_id: str) -> ConversationView:
        """Point the conversation at its newest message and bump it in listings."""
        oid = to_object_id(chat_id)
        message_oid = to_object_id(message_id, "messageId")
        message = await self._message_repo.get_latest_message(message_oid)
        if message is None:
            raise NotFound("Message Not Found")
        if str(message.get("conversation_id")) != str(oid):
            raise InvalidArgument("Message does not belong to this chat")

        convo = await self._conversation_repo.set_latest_message(oid, message_oid)
        if convo is None:
            raise NotFound()
        return await self._assembler.assemble(convo)

    async def _require_group(self, oid: ObjectId) -> Dict[str, Any]:
        convo = await self._conversation_repo.find_by_id(oid)
        if convo is None:
            raise NotFound()
        if convo.get("kind") != GROUP:
            raise InvalidArgument("Only group conversations can be modified")
        return convo
