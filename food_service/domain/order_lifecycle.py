"""Order lifecycle rules.

Everything here is pure: status parsing, the update payload of a transition,
the order descriptor used in notification text, the notification text itself
and the display name resolution for order items. Persistence lives in the
use cases.
"""
import re
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional, Sequence, Tuple

from food_service.domain.exceptions import InvalidInputError
from food_service.domain.models import OrderItem, OrderStatus


VALID_STATUSES = [status.value for status in OrderStatus]

# integer columns are 32-bit
INT_MIN = -2 ** 31
INT_MAX = 2 ** 31 - 1

LEADING_INT = re.compile(r"\s*([+-]?\d+)")

# status -> (title, message); {items} is the order descriptor
NOTIFICATION_TEMPLATES = {
    OrderStatus.PROCESSING: (
        "Order is being processed",
        "Your order {items} is being processed.",
    ),
    OrderStatus.SHIPPED: (
        "Order is being shipped",
        "Your order {items} is on its way to you.",
    ),
    OrderStatus.DELIVERED: (
        "Order delivered successfully",
        "Your order {items} was delivered. Thank you!",
    ),
    OrderStatus.CANCELLED: (
        "Order cancelled",
        "Your order {items} was cancelled.",
    ),
    OrderStatus.RETURNING: (
        "Return request received",
        "Your return request for {items} was received and will be reviewed.",
    ),
    OrderStatus.RETURNED: (
        "Order returned successfully",
        "Your order {items} was returned. Refund will post in 3–5 business days.",
    ),
}

RETURN_REJECTED_TEMPLATE = (
    "Return request rejected",
    "Your return request for {items} was rejected. Contact us for details.",
)

STATUS_UPDATED_TEMPLATE = (
    "Order status updated",
    "Your order {items} was updated to status {status}.",
)


def parse_status(value: Optional[str]) -> OrderStatus:
    if not value:
        raise InvalidInputError("Status is required")
    try:
        return OrderStatus(value)
    except ValueError:
        raise InvalidInputError(f"Invalid status. Valid values are: {', '.join(VALID_STATUSES)}")


def build_status_update(
    new_status: OrderStatus,
    reason: Optional[str] = None,
    now: Optional[datetime] = None,
) -> dict:
    """Column values written by a transition to new_status"""
    values = {"status": new_status}
    if new_status == OrderStatus.RETURNING and reason:
        values["return_reason"] = reason
    if new_status == OrderStatus.DELIVERED:
        values["delivered_at"] = now or datetime.now(timezone.utc)
    return values


def describe_items(items: Sequence[OrderItem]) -> str:
    """Order descriptor: "", the single item's name, or "(N sản phẩm)" """
    if not items:
        return ""
    if len(items) == 1:
        item = items[0]
        return item.name or f"#{item.product_id}"
    return f"({len(items)} sản phẩm)"


def compose_status_notification(
    new_status: OrderStatus,
    previous_status: Optional[OrderStatus],
    items_text: str,
) -> Tuple[str, str]:
    if new_status == OrderStatus.DELIVERED and previous_status == OrderStatus.RETURNING:
        title, template = RETURN_REJECTED_TEMPLATE
    elif new_status in NOTIFICATION_TEMPLATES:
        title, template = NOTIFICATION_TEMPLATES[new_status]
    else:
        title, template = STATUS_UPDATED_TEMPLATE
    return title, template.format(items=items_text, status=new_status.value)


def placeholder_name(product_id: Any) -> str:
    return f"Product #{product_id}"


def resolve_display_name(
    supplied_name: Optional[str],
    product_lookup: Mapping[int, str],
    product_id: Any,
) -> str:
    """Supplied name, else the product's name, else the placeholder"""
    if supplied_name:
        return supplied_name
    product_name = product_lookup.get(product_id)
    if product_name:
        return product_name
    return placeholder_name(product_id)


def parse_product_id(value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidInputError(f"Invalid product ID: {value}")
    try:
        product_id = int(value)
    except (TypeError, ValueError, OverflowError):
        raise InvalidInputError(f"Invalid product ID: {value}")
    if not INT_MIN <= product_id <= INT_MAX:
        raise InvalidInputError(f"Invalid product ID: {value}")
    return product_id


def parse_quantity(value: Any) -> int:
    """Leading integer of value, like "3abc" -> 3; 1 when absent or below 1"""
    if isinstance(value, bool) or value is None:
        return 1
    if not isinstance(value, (int, float)):
        match = LEADING_INT.match(str(value))
        if not match:
            return 1
        value = match.group(1)
    try:
        quantity = int(value)
    except (ValueError, OverflowError):
        return 1
    return quantity if 1 <= quantity <= INT_MAX else 1


def parse_price(value: Any) -> Decimal:
    try:
        price = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal("0")
    if not price.is_finite() or price < 0:
        return Decimal("0")
    return price


def parse_total_amount(value: Any) -> Decimal:
    if value is None or value == "":
        raise InvalidInputError("Invalid order data")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidInputError("Invalid order data")
    if not amount.is_finite() or amount < 0:
        raise InvalidInputError("Invalid order data")
    return amount
