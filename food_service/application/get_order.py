from typing import List, Optional
from pydantic import BaseModel

from food_service.domain.models import Order, OrderItem
from food_service.domain.exceptions import OrderNotFoundError
from food_service.domain.order_lifecycle import parse_status, resolve_display_name


class OrderWithItems(Order):
    items: List[OrderItem] = []


class OrderDetails(BaseModel):
    order: Order
    items: List[OrderItem]


def with_display_name(item: OrderItem) -> OrderItem:
    lookup = {item.product_id: item.product_name} if item.product_name else {}
    return item.model_copy(update={"name": resolve_display_name(item.name, lookup, item.product_id)})


class ListOrdersUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, user_id: Optional[int] = None, status: Optional[str] = None) -> List[OrderWithItems]:
        status_filter = parse_status(status) if status else None
        async with self._uow() as uow:
            orders = await uow.orders.list(user_id=user_id, status=status_filter)
            items = await uow.order_items.list_with_products(order.id for order in orders)

        by_order = {}
        for item in items:
            by_order.setdefault(item.order_id, []).append(with_display_name(item))
        return [
            OrderWithItems(**order.model_dump(), items=by_order.get(order.id, []))
            for order in orders
        ]


class GetOrderDetailsUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, order_id: int) -> OrderDetails:
        async with self._uow() as uow:
            order = await uow.orders.get_by_id(order_id)
            if not order:
                raise OrderNotFoundError("Order not found")
            items = await uow.order_items.list_with_products([order_id])
            return OrderDetails(order=order, items=items)


class ListOrderItemsUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, order_id: int) -> List[OrderItem]:
        async with self._uow() as uow:
            return await uow.order_items.list_with_products([order_id])


class ListUserOrdersUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, user_id: int) -> List[Order]:
        async with self._uow() as uow:
            return await uow.orders.list_by_user(user_id)
