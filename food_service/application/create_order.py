import logging
from typing import Any, List, Optional
from pydantic import BaseModel

from food_service.domain.models import NewOrderItem, Order, OrderItem, OrderStatus
from food_service.domain.exceptions import InvalidInputError
from food_service.domain.order_lifecycle import (
    parse_price, parse_product_id, parse_quantity, parse_total_amount, resolve_display_name
)


logger = logging.getLogger(__name__)


class OrderItemDTO(BaseModel):
    product_id: Optional[Any] = None
    id: Optional[Any] = None
    name: Optional[str] = None
    quantity: Optional[Any] = None
    price: Optional[Any] = None

    @property
    def raw_product_id(self) -> Any:
        return self.product_id if self.product_id is not None else self.id


class CreateOrderDTO(BaseModel):
    user_id: Optional[int] = None
    total_amount: Optional[Any] = None
    items: Optional[List[OrderItemDTO]] = None


class CreatedOrder(BaseModel):
    order: Order
    items: List[OrderItem]


class CreateOrderUseCase:
    """Inserts the order, then each item in its own commit.

    A bad product id stops the loop; items already inserted stay.
    """

    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, order_data: CreateOrderDTO) -> CreatedOrder:
        if order_data.user_id is None or not order_data.items:
            raise InvalidInputError("Invalid order data")
        total_amount = parse_total_amount(order_data.total_amount)

        logger.info(f"Creating order for user {order_data.user_id} with {len(order_data.items)} items")

        async with self._uow() as uow:
            order = await uow.orders.create(order_data.user_id, total_amount, OrderStatus.PENDING)
            await uow.commit()
            logger.info(f"Order created: {order.id}")

            items = []
            for item in order_data.items:
                product_id = parse_product_id(item.raw_product_id)

                product_lookup = {}
                if not item.name:
                    logger.warning(f"No name supplied for product_id {product_id}, looking up the product")
                    product = await uow.products.get_by_id(product_id)
                    if product:
                        product_lookup[product.id] = product.name
                    else:
                        logger.warning(f"Product {product_id} not found, using placeholder name")
                name = resolve_display_name(item.name, product_lookup, product_id)

                created = await uow.order_items.create(NewOrderItem(
                    order_id=order.id,
                    product_id=product_id,
                    name=name,
                    quantity=parse_quantity(item.quantity),
                    price=parse_price(item.price)
                ))
                await uow.commit()
                items.append(created)

        return CreatedOrder(order=order, items=items)
