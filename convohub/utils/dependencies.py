from typing import Optional

from fastapi import Depends, Header, HTTPException, status

from convohub.core.config import Settings, get_settings
from convohub.database.connection import mongo_db_dependency
from convohub.repositories.conversation_repository import ConversationRepository
from convohub.repositories.message_repository import MessageRepository
from convohub.repositories.user_repository import UserRepository
from convohub.services.conversation_service import ConversationService
from convohub.services.view_assembler import ConversationViewAssembler


async def get_current_user(x_forwarded_user: Optional[str] = Header(default=None)) -> dict:
    """
    Identity is established by the upstream auth gateway, which forwards the
    authenticated user id in the X-Forwarded-User header.
    """
    if not x_forwarded_user or not x_forwarded_user.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return {"_id": x_forwarded_user.strip()}


def get_conversation_service(
    db=Depends(mongo_db_dependency),
    settings: Settings = Depends(get_settings),
) -> ConversationService:
    message_repo = MessageRepository(db)
    assembler = ConversationViewAssembler(
        UserRepository(db, default_picture=settings.DEFAULT_AVATAR_URL),
        message_repo,
    )
    return ConversationService(ConversationRepository(db), message_repo, assembler)
