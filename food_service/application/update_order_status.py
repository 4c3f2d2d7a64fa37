import logging
from datetime import datetime
from typing import Callable, Optional
from pydantic import BaseModel

from food_service.domain.models import StatusChange
from food_service.domain.exceptions import OrderNotFoundError
from food_service.domain.order_lifecycle import (
    build_status_update, compose_status_notification, describe_items, parse_status
)

logger = logging.getLogger(__name__)


class UpdateOrderStatusDTO(BaseModel):
    status: Optional[str] = None
    reason: Optional[str] = None


class UpdateOrderStatusUseCase:
    """Moves an order to a new status and notifies its owner.

    Any status may follow any other. The status update and the notification
    are committed separately, so a failed notification insert leaves the new
    status in place.
    """

    def __init__(self, unit_of_work, clock: Optional[Callable[[], datetime]] = None):
        self._uow = unit_of_work
        self._clock = clock

    async def __call__(self, order_id: int, dto: UpdateOrderStatusDTO) -> StatusChange:
        new_status = parse_status(dto.status)
        logger.info(f"Updating order #{order_id} status to: {new_status.value}")

        async with self._uow() as uow:
            order = await uow.orders.get_by_id(order_id)
            if not order:
                raise OrderNotFoundError("Order not found")

            items = await uow.order_items.list_by_order(order_id)
            items_text = describe_items(items)

            now = self._clock() if self._clock else None
            await uow.orders.update(order_id, build_status_update(new_status, dto.reason, now))
            await uow.commit()

            title, message = compose_status_notification(new_status, order.status, items_text)
            await uow.notifications.create(user_id=order.user_id, title=title, message=message)
            await uow.commit()

        logger.info(f"Order #{order_id}: {order.status.value} -> {new_status.value}, user {order.user_id} notified")
        return StatusChange(id=order_id, status=new_status)
