from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from pydantic import BaseModel


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    RETURNING = "returning"
    RETURNED = "returned"


ADMIN_ROLE = "admin"
USER_ROLE = "user"
ADMIN_SENDER = "admin"


class Order(BaseModel):
    """Domain Entity: an order"""
    id: int
    user_id: int
    total_amount: Decimal
    status: OrderStatus
    return_reason: Optional[str] = None
    delivered_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    user_name: Optional[str] = None

    def is_returning(self) -> bool:
        """A return request is open on this order"""
        return self.status == OrderStatus.RETURNING


class OrderItem(BaseModel):
    """Order line. product_name/product_image are filled only by joined reads."""
    id: int
    order_id: int
    product_id: Optional[int] = None
    name: Optional[str] = None
    quantity: int = 1
    price: Decimal = Decimal("0")
    product_name: Optional[str] = None
    product_image: Optional[str] = None


class NewOrderItem(BaseModel):
    order_id: int
    product_id: int
    name: str
    quantity: int
    price: Decimal


class Notification(BaseModel):
    id: int
    user_id: int
    title: str
    message: str
    is_read: bool = False
    created_at: Optional[datetime] = None


class User(BaseModel):
    """Domain Entity: an account. password holds the bcrypt hash."""
    id: int
    name: str
    email: str
    password: str
    role: str = USER_ROLE
    profile_image: Optional[str] = None
    created_at: Optional[datetime] = None

    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE

    def public(self) -> dict:
        return self.model_dump(exclude={"password"})


class Product(BaseModel):
    id: int
    name: str
    price: Decimal
    description: str = ""
    image_path: str = ""
    category: str = "Other"
    created_at: Optional[datetime] = None


class ChatMessage(BaseModel):
    id: int
    user_id: int
    sender: str
    message: str
    is_read: bool = False
    created_at: Optional[datetime] = None


class ChatParticipant(BaseModel):
    """Value Object: one conversation in the admin chat list"""
    user_id: int
    user_name: Optional[str] = None
    message: Optional[str] = None
    created_at: Optional[datetime] = None
    unread_count: int = 0


class StatusChange(BaseModel):
    id: int
    status: OrderStatus


class SweepReport(BaseModel):
    """Outcome of a repair sweep over order items"""
    scanned: int = 0
    fixed: int = 0
    failed: int = 0
    missing_products: int = 0
