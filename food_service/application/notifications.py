import logging
from typing import List

from food_service.domain.models import Notification
from food_service.domain.exceptions import NotificationNotFoundError

logger = logging.getLogger(__name__)


class ListNotificationsUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, user_id: int) -> List[Notification]:
        async with self._uow() as uow:
            notifications = await uow.notifications.list_by_user(user_id)
        logger.info(f"Found {len(notifications)} notifications for user {user_id}")
        return notifications


class MarkNotificationReadUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, notification_id: int) -> None:
        async with self._uow() as uow:
            if not await uow.notifications.mark_as_read(notification_id):
                raise NotificationNotFoundError("Notification not found")
            await uow.commit()


class MarkAllNotificationsReadUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, user_id: int) -> None:
        async with self._uow() as uow:
            await uow.notifications.mark_all_as_read(user_id)
            await uow.commit()
