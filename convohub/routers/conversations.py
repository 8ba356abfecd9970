from typing import List

from fastapi import APIRouter, Depends

from convohub.schemas.conversation import (
    AccessChatRequest,
    ConversationView,
    CreateGroupRequest,
    GroupMemberRequest,
    RenameGroupRequest,
)
from convohub.services.conversation_service import ConversationService
from convohub.utils.dependencies import get_conversation_service, get_current_user


router = APIRouter(prefix="/api/chat", tags=["chat"])


@router.post("", response_model=ConversationView)
async def access_chat(body: AccessChatRequest, current_user: dict = Depends(get_current_user), service: ConversationService = Depends(get_conversation_service)):
    return await service.access_one_to_one(current_user["_id"], body.user_id)


@router.get("", response_model=List[ConversationView])
async def fetch_chats(current_user: dict = Depends(get_current_user), service: ConversationService = Depends(get_conversation_service)):
    return await service.list_conversations(current_user["_id"])


@router.post("/group", response_model=ConversationView)
async def create_group_chat(body: CreateGroupRequest, current_user: dict = Depends(get_current_user), service: ConversationService = Depends(get_conversation_service)):
    return await service.create_group(current_user["_id"], body.name, body.users)


@router.put("/rename", response_model=ConversationView)
async def rename_group(body: RenameGroupRequest, current_user: dict = Depends(get_current_user), service: ConversationService = Depends(get_conversation_service)):
    return await service.rename_group(body.chat_id, body.chat_name)


@router.put("/groupadd", response_model=ConversationView)
async def add_to_group(body: GroupMemberRequest, current_user: dict = Depends(get_current_user), service: ConversationService = Depends(get_conversation_service)):
    return await service.add_member(body.chat_id, body.user_id)


@router.put("/groupremove", response_model=ConversationView)
async def remove_from_group(body: GroupMemberRequest, current_user: dict = Depends(get_current_user), service: ConversationService = Depends(get_conversation_service)):
    return await service.remove_member(body.chat_id, body.user_id)


@router.get("/{chat_id}", response_model=ConversationView)
async def get_chat(chat_id: str, current_user: dict = Depends(get_current_user), service: ConversationService = Depends(get_conversation_service)):
    return await service.get_conversation(chat_id)
