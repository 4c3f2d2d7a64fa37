from sqlalchemy import (
    Table, Column, String, Integer, Enum, DateTime, Numeric, Text, Boolean, ForeignKey, MetaData
)
from sqlalchemy.sql import func

from food_service.domain.models import OrderStatus

metadata = MetaData()


users_tbl = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String, nullable=False),
    Column("email", String, nullable=False, unique=True, index=True),
    Column("password", String, nullable=False),
    Column("role", String, nullable=False, default="user"),
    Column("profile_image", String, nullable=True),
    Column("created_at", DateTime(timezone=True), server_default=func.now())
)


products_tbl = Table(
    "products",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String, nullable=False),
    Column("price", Numeric(12, 2), nullable=False),
    Column("description", Text, nullable=False, default=""),
    Column("image_path", String, nullable=False, default=""),
    Column("category", String, nullable=False, default="Other", index=True),
    Column("created_at", DateTime(timezone=True), server_default=func.now())
)


orders_tbl = Table(
    "orders",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, ForeignKey("users.id"), nullable=False, index=True),
    Column("total_amount", Numeric(12, 2), nullable=False),
    Column(
        "status",
        Enum(OrderStatus, name="order_status", values_callable=lambda enum: [m.value for m in enum]),
        nullable=False,
        default=OrderStatus.PENDING
    ),
    Column("return_reason", Text, nullable=True),
    Column("delivered_at", DateTime(timezone=True), nullable=True),
    Column("created_at", DateTime(timezone=True), server_default=func.now())
)


# product_id has no foreign key: items outlive deleted products
order_items_tbl = Table(
    "order_items",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("order_id", Integer, ForeignKey("orders.id"), nullable=False, index=True),
    Column("product_id", Integer, nullable=True),
    Column("name", String, nullable=True),
    Column("quantity", Integer, nullable=False, default=1),
    Column("price", Numeric(12, 2), nullable=False, default=0)
)


notifications_tbl = Table(
    "notifications",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, ForeignKey("users.id"), nullable=False, index=True),
    Column("title", String, nullable=False),
    Column("message", Text, nullable=False),
    Column("is_read", Boolean, nullable=False, default=False),
    Column("created_at", DateTime(timezone=True), server_default=func.now())
)


chat_messages_tbl = Table(
    "chat_messages",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, ForeignKey("users.id"), nullable=False, index=True),
    Column("sender", String, nullable=False),
    Column("message", Text, nullable=False),
    Column("is_read", Boolean, nullable=False, default=False),
    Column("created_at", DateTime(timezone=True), server_default=func.now())
)
