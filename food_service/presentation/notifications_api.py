from fastapi import APIRouter, Depends

from food_service.presentation.dependencies import provide
from food_service.presentation.errors import to_http_exception
from food_service.presentation.schemas import ErrorResponse, success
from food_service.application.notifications import (
    ListNotificationsUseCase, MarkAllNotificationsReadUseCase, MarkNotificationReadUseCase
)
from food_service.domain.exceptions import DomainException

router = APIRouter(tags=["notifications"])


@router.get("/users/{user_id}/notifications")
async def list_notifications(
    user_id: int,
    use_case: ListNotificationsUseCase = Depends(provide(ListNotificationsUseCase))
):
    try:
        notifications = await use_case(user_id)
    except DomainException as e:
        raise to_http_exception(e)
    return success(data=notifications)


@router.put("/notifications/{notification_id}/read", responses={404: {"model": ErrorResponse}})
async def mark_notification_read(
    notification_id: int,
    use_case: MarkNotificationReadUseCase = Depends(provide(MarkNotificationReadUseCase))
):
    try:
        await use_case(notification_id)
    except DomainException as e:
        raise to_http_exception(e)
    return success(message="Notification marked as read")


@router.put("/users/{user_id}/notifications/read-all")
async def mark_all_notifications_read(
    user_id: int,
    use_case: MarkAllNotificationsReadUseCase = Depends(provide(MarkAllNotificationsReadUseCase))
):
    try:
        await use_case(user_id)
    except DomainException as e:
        raise to_http_exception(e)
    return success(message="All notifications marked as read")
