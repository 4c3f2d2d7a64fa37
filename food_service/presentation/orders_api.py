from typing import Optional
from fastapi import APIRouter, Depends, status

from food_service.presentation.dependencies import provide, get_update_order_status_use_case
from food_service.presentation.errors import to_http_exception
from food_service.presentation.schemas import (
    CreateOrderRequest, ErrorResponse, UpdateOrderStatusRequest, success
)
from food_service.application.create_order import CreateOrderDTO, CreateOrderUseCase
from food_service.application.get_order import (
    GetOrderDetailsUseCase, ListOrderItemsUseCase, ListOrdersUseCase, ListUserOrdersUseCase
)
from food_service.application.update_order_status import UpdateOrderStatusDTO, UpdateOrderStatusUseCase
from food_service.domain.exceptions import DomainException

router = APIRouter(tags=["orders"])


@router.post(
    "/orders",
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    status_code=status.HTTP_201_CREATED
)
async def create_order(
    request: CreateOrderRequest,
    use_case: CreateOrderUseCase = Depends(provide(CreateOrderUseCase))
):
    """Create an order with its items"""
    try:
        created = await use_case(CreateOrderDTO(**request.model_dump()))
    except DomainException as e:
        raise to_http_exception(e)

    return success(
        message="Order created successfully",
        data={
            "order_id": created.order.id,
            **created.order.model_dump(),
            "items": [item.model_dump(exclude={"product_name", "product_image"}) for item in created.items]
        }
    )


@router.get("/orders")
async def list_orders(
    user_id: Optional[int] = None,
    status: Optional[str] = None,
    use_case: ListOrdersUseCase = Depends(provide(ListOrdersUseCase))
):
    """Orders with their items, optionally filtered by user and status"""
    try:
        orders = await use_case(user_id=user_id, status=status)
    except DomainException as e:
        raise to_http_exception(e)
    return success(data=orders)


@router.put(
    "/orders/{order_id}/status",
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}
)
async def update_order_status(
    order_id: int,
    request: UpdateOrderStatusRequest,
    use_case: UpdateOrderStatusUseCase = Depends(get_update_order_status_use_case)
):
    """Change the order status and notify the customer"""
    try:
        change = await use_case(order_id, UpdateOrderStatusDTO(status=request.status, reason=request.reason))
    except DomainException as e:
        raise to_http_exception(e)
    return success(message="Order status updated successfully", data=change)


@router.get("/orders/{order_id}/details", responses={404: {"model": ErrorResponse}})
async def get_order_details(
    order_id: int,
    use_case: GetOrderDetailsUseCase = Depends(provide(GetOrderDetailsUseCase))
):
    try:
        details = await use_case(order_id)
    except DomainException as e:
        raise to_http_exception(e)
    return success(data=details)


@router.get("/orders/{order_id}/items")
async def list_order_items(
    order_id: int,
    use_case: ListOrderItemsUseCase = Depends(provide(ListOrderItemsUseCase))
):
    try:
        items = await use_case(order_id)
    except DomainException as e:
        raise to_http_exception(e)
    return success(data=items)


@router.get("/users/{user_id}/orders")
async def list_user_orders(
    user_id: int,
    use_case: ListUserOrdersUseCase = Depends(provide(ListUserOrdersUseCase))
):
    try:
        orders = await use_case(user_id)
    except DomainException as e:
        raise to_http_exception(e)
    return success(data=orders)
