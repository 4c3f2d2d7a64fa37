import logging
from datetime import datetime, timezone
from typing import List, Optional
from pydantic import BaseModel

from food_service.domain.models import ChatMessage, ChatParticipant
from food_service.domain.exceptions import InvalidInputError

logger = logging.getLogger(__name__)


class SendMessageDTO(BaseModel):
    user_id: Optional[int] = None
    message: Optional[str] = None
    sender: Optional[str] = None


class ListChatMessagesUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, user_id: int) -> List[ChatMessage]:
        async with self._uow() as uow:
            messages = await uow.chat.list_by_user(user_id)
        logger.info(f"Retrieved {len(messages)} messages for user {user_id}")
        return messages


class SendChatMessageUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, dto: SendMessageDTO) -> ChatMessage:
        if not dto.user_id or not dto.message or not dto.sender:
            raise InvalidInputError("Missing required fields")
        async with self._uow() as uow:
            message = await uow.chat.create(user_id=dto.user_id, sender=dto.sender, message=dto.message)
            await uow.commit()
        logger.info(f"Message saved, ID: {message.id}")
        return message


class ListChatParticipantsUseCase:
    """Conversations for the admin chat list, most recent first"""

    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self) -> List[ChatParticipant]:
        async with self._uow() as uow:
            participants = await uow.chat.list_participants()

        formatted = []
        for participant in participants:
            if participant.user_name is None or participant.message is None:
                logger.warning(f"Incomplete chat participant row: {participant}")
            formatted.append(ChatParticipant(
                user_id=participant.user_id,
                user_name=participant.user_name or "Unnamed user",
                message=participant.message or "No messages",
                created_at=participant.created_at or datetime.now(timezone.utc),
                unread_count=participant.unread_count or 0
            ))
        return formatted


class MarkChatReadUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, user_id: Optional[int], sender: Optional[str]) -> None:
        if not user_id or not sender:
            raise InvalidInputError("userId and sender are required")
        logger.info(f"Marking messages as read for user {user_id}, sender {sender}")
        async with self._uow() as uow:
            await uow.chat.mark_as_read(user_id, sender)
            await uow.commit()
