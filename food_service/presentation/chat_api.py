from fastapi import APIRouter, Depends, Response

from food_service.presentation.dependencies import provide
from food_service.presentation.errors import to_http_exception
from food_service.presentation.schemas import ErrorResponse, MarkChatReadRequest, SendMessageRequest, success
from food_service.application.chat import (
    ListChatMessagesUseCase, ListChatParticipantsUseCase, MarkChatReadUseCase, SendChatMessageUseCase,
    SendMessageDTO
)
from food_service.domain.exceptions import DomainException

router = APIRouter(prefix="/chat", tags=["chat"])

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


@router.get("/messages/{user_id}")
async def list_messages(
    user_id: int,
    response: Response,
    use_case: ListChatMessagesUseCase = Depends(provide(ListChatMessagesUseCase))
):
    try:
        messages = await use_case(user_id)
    except DomainException as e:
        raise to_http_exception(e)
    response.headers.update(NO_CACHE_HEADERS)
    return success(data=messages)


@router.post("/messages", responses={400: {"model": ErrorResponse}})
async def send_message(
    request: SendMessageRequest,
    use_case: SendChatMessageUseCase = Depends(provide(SendChatMessageUseCase))
):
    try:
        message = await use_case(SendMessageDTO(
            user_id=request.user_id,
            message=request.message,
            sender=request.sender
        ))
    except DomainException as e:
        raise to_http_exception(e)
    return success(message="Message sent successfully", data={"id": message.id})


@router.get("/users")
async def list_participants(
    use_case: ListChatParticipantsUseCase = Depends(provide(ListChatParticipantsUseCase))
):
    """Conversations with last message and unread count, for the admin inbox"""
    try:
        participants = await use_case()
    except DomainException as e:
        raise to_http_exception(e)
    return success(data=participants)


@router.post("/mark-read", responses={400: {"model": ErrorResponse}})
async def mark_read(
    request: MarkChatReadRequest,
    response: Response,
    use_case: MarkChatReadUseCase = Depends(provide(MarkChatReadUseCase))
):
    try:
        await use_case(request.user_id, request.sender)
    except DomainException as e:
        raise to_http_exception(e)
    response.headers.update(NO_CACHE_HEADERS)
    return success(message="Messages marked as read")
