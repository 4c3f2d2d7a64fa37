from decimal import Decimal
from typing import Dict, Iterable, List, Optional
from sqlalchemy import select, insert, update, delete, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from food_service.domain.models import (
    ADMIN_SENDER, ChatMessage, ChatParticipant, NewOrderItem, Notification, Order, OrderItem, OrderStatus,
    Product, User
)
from food_service.infrastructure.db_schema import (
    users_tbl, products_tbl, orders_tbl, order_items_tbl, notifications_tbl, chat_messages_tbl
)
from food_service.application.interfaces import (
    UserRepository, ProductRepository, OrderRepository, OrderItemRepository, NotificationRepository, ChatRepository
)


class SQLAlchemyUserRepository(UserRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, user_id: int) -> Optional[User]:
        result = await self._session.execute(
            select(users_tbl).where(users_tbl.c.id == user_id)
        )
        row = result.fetchone()
        return User(**row._mapping) if row else None

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self._session.execute(
            select(users_tbl).where(users_tbl.c.email == email)
        )
        row = result.fetchone()
        return User(**row._mapping) if row else None

    async def list(self) -> List[User]:
        result = await self._session.execute(
            select(users_tbl).order_by(users_tbl.c.created_at.desc())
        )
        return [User(**row._mapping) for row in result.fetchall()]

    async def create(self, name: str, email: str, password: str, role: str) -> User:
        stmt = (
            insert(users_tbl)
            .values(name=name, email=email, password=password, role=role)
            .returning(users_tbl)
        )
        result = await self._session.execute(stmt)
        return User(**result.one()._mapping)

    async def update(self, user_id: int, values: dict) -> Optional[User]:
        stmt = (
            update(users_tbl)
            .where(users_tbl.c.id == user_id)
            .values(**values)
            .returning(users_tbl)
        )
        result = await self._session.execute(stmt)
        row = result.fetchone()
        return User(**row._mapping) if row else None

    async def delete(self, user_id: int) -> bool:
        result = await self._session.execute(
            delete(users_tbl).where(users_tbl.c.id == user_id).returning(users_tbl.c.id)
        )
        return result.fetchone() is not None

    async def count_by_role(self, role: str) -> int:
        result = await self._session.execute(
            select(func.count()).select_from(users_tbl).where(users_tbl.c.role == role)
        )
        return result.scalar_one()

    async def email_taken(self, email: str, exclude_user_id: Optional[int] = None) -> bool:
        stmt = select(users_tbl.c.id).where(users_tbl.c.email == email)
        if exclude_user_id is not None:
            stmt = stmt.where(users_tbl.c.id != exclude_user_id)
        result = await self._session.execute(stmt.limit(1))
        return result.fetchone() is not None


class SQLAlchemyProductRepository(ProductRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, product_id: int) -> Optional[Product]:
        result = await self._session.execute(
            select(products_tbl).where(products_tbl.c.id == product_id)
        )
        row = result.fetchone()
        return Product(**row._mapping) if row else None

    async def list(self, category: Optional[str] = None, search: Optional[str] = None) -> List[Product]:
        stmt = select(products_tbl)
        if category:
            stmt = stmt.where(products_tbl.c.category == category)
        if search:
            stmt = stmt.where(products_tbl.c.name.ilike(f"%{search}%"))
        result = await self._session.execute(stmt.order_by(products_tbl.c.id.desc()))
        return [Product(**row._mapping) for row in result.fetchall()]

    async def create(self, values: dict) -> Product:
        result = await self._session.execute(
            insert(products_tbl).values(**values).returning(products_tbl)
        )
        return Product(**result.one()._mapping)

    async def update(self, product_id: int, values: dict) -> Optional[Product]:
        stmt = (
            update(products_tbl)
            .where(products_tbl.c.id == product_id)
            .values(**values)
            .returning(products_tbl)
        )
        result = await self._session.execute(stmt)
        row = result.fetchone()
        return Product(**row._mapping) if row else None

    async def delete(self, product_id: int) -> bool:
        result = await self._session.execute(
            delete(products_tbl).where(products_tbl.c.id == product_id).returning(products_tbl.c.id)
        )
        return result.fetchone() is not None

    async def get_first(self) -> Optional[Product]:
        result = await self._session.execute(
            select(products_tbl).order_by(products_tbl.c.id.asc()).limit(1)
        )
        row = result.fetchone()
        return Product(**row._mapping) if row else None

    async def names_by_id(self, product_ids: Iterable[int]) -> Dict[int, str]:
        ids = {product_id for product_id in product_ids if product_id is not None}
        if not ids:
            return {}
        result = await self._session.execute(
            select(products_tbl.c.id, products_tbl.c.name).where(products_tbl.c.id.in_(ids))
        )
        return {row.id: row.name for row in result.fetchall()}


class SQLAlchemyOrderRepository(OrderRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, order_id: int) -> Optional[Order]:
        result = await self._session.execute(
            select(orders_tbl).where(orders_tbl.c.id == order_id)
        )
        row = result.fetchone()
        return self._to_domain(row) if row else None

    async def create(self, user_id: int, total_amount: Decimal, status: OrderStatus) -> Order:
        stmt = (
            insert(orders_tbl)
            .values(user_id=user_id, total_amount=total_amount, status=status)
            .returning(orders_tbl)
        )
        result = await self._session.execute(stmt)
        return self._to_domain(result.one())

    async def update(self, order_id: int, values: dict) -> None:
        await self._session.execute(
            update(orders_tbl).where(orders_tbl.c.id == order_id).values(**values)
        )

    async def list(self, user_id: Optional[int] = None, status: Optional[OrderStatus] = None) -> List[Order]:
        stmt = (
            select(orders_tbl, users_tbl.c.name.label("user_name"))
            .join(users_tbl, users_tbl.c.id == orders_tbl.c.user_id)
        )
        if user_id is not None:
            stmt = stmt.where(orders_tbl.c.user_id == user_id)
        if status is not None:
            stmt = stmt.where(orders_tbl.c.status == status)
        result = await self._session.execute(stmt.order_by(orders_tbl.c.id.desc()))
        return [self._to_domain(row) for row in result.fetchall()]

    async def list_by_user(self, user_id: int) -> List[Order]:
        result = await self._session.execute(
            select(orders_tbl)
            .where(orders_tbl.c.user_id == user_id)
            .order_by(orders_tbl.c.created_at.desc())
        )
        return [self._to_domain(row) for row in result.fetchall()]

    def _to_domain(self, row) -> Order:
        """DB row -> Domain"""
        data = dict(row._mapping)
        data["status"] = OrderStatus(data["status"])
        return Order(**data)


class SQLAlchemyOrderItemRepository(OrderItemRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def create(self, item: NewOrderItem) -> OrderItem:
        result = await self._session.execute(
            insert(order_items_tbl).values(**item.model_dump()).returning(order_items_tbl)
        )
        return OrderItem(**result.one()._mapping)

    async def list_by_order(self, order_id: int) -> List[OrderItem]:
        result = await self._session.execute(
            select(order_items_tbl)
            .where(order_items_tbl.c.order_id == order_id)
            .order_by(order_items_tbl.c.id.asc())
        )
        return [OrderItem(**row._mapping) for row in result.fetchall()]

    async def list_with_products(self, order_ids: Iterable[int]) -> List[OrderItem]:
        ids = list(order_ids)
        if not ids:
            return []
        stmt = self._joined_with_products().where(order_items_tbl.c.order_id.in_(ids))
        result = await self._session.execute(stmt.order_by(order_items_tbl.c.id.asc()))
        return [OrderItem(**row._mapping) for row in result.fetchall()]

    async def list_unnamed(self, order_status: Optional[OrderStatus] = None) -> List[OrderItem]:
        stmt = select(order_items_tbl).where(
            or_(order_items_tbl.c.name.is_(None), order_items_tbl.c.name == "")
        )
        if order_status is not None:
            stmt = (
                stmt.join(orders_tbl, orders_tbl.c.id == order_items_tbl.c.order_id)
                .where(orders_tbl.c.status == order_status)
            )
        result = await self._session.execute(stmt.order_by(order_items_tbl.c.id.asc()))
        return [OrderItem(**row._mapping) for row in result.fetchall()]

    async def list_orphaned(self) -> List[OrderItem]:
        stmt = (
            select(order_items_tbl)
            .select_from(
                order_items_tbl.outerjoin(products_tbl, products_tbl.c.id == order_items_tbl.c.product_id)
            )
            .where(products_tbl.c.id.is_(None))
            .order_by(order_items_tbl.c.id.asc())
        )
        result = await self._session.execute(stmt)
        return [OrderItem(**row._mapping) for row in result.fetchall()]

    async def sample_with_products(self, limit: int) -> List[OrderItem]:
        stmt = self._joined_with_products().order_by(order_items_tbl.c.id.asc()).limit(limit)
        result = await self._session.execute(stmt)
        return [OrderItem(**row._mapping) for row in result.fetchall()]

    async def update(self, item_id: int, values: dict) -> None:
        await self._session.execute(
            update(order_items_tbl).where(order_items_tbl.c.id == item_id).values(**values)
        )

    def _joined_with_products(self):
        return (
            select(
                order_items_tbl,
                products_tbl.c.name.label("product_name"),
                products_tbl.c.image_path.label("product_image")
            )
            .select_from(
                order_items_tbl.outerjoin(products_tbl, products_tbl.c.id == order_items_tbl.c.product_id)
            )
        )


class SQLAlchemyNotificationRepository(NotificationRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def create(self, user_id: int, title: str, message: str) -> Notification:
        stmt = (
            insert(notifications_tbl)
            .values(user_id=user_id, title=title, message=message, is_read=False)
            .returning(notifications_tbl)
        )
        result = await self._session.execute(stmt)
        return Notification(**result.one()._mapping)

    async def list_by_user(self, user_id: int) -> List[Notification]:
        result = await self._session.execute(
            select(notifications_tbl)
            .where(notifications_tbl.c.user_id == user_id)
            .order_by(notifications_tbl.c.created_at.desc())
        )
        return [Notification(**row._mapping) for row in result.fetchall()]

    async def mark_as_read(self, notification_id: int) -> bool:
        result = await self._session.execute(
            update(notifications_tbl)
            .where(notifications_tbl.c.id == notification_id)
            .values(is_read=True)
            .returning(notifications_tbl.c.id)
        )
        return result.fetchone() is not None

    async def mark_all_as_read(self, user_id: int) -> None:
        await self._session.execute(
            update(notifications_tbl)
            .where(notifications_tbl.c.user_id == user_id)
            .values(is_read=True)
        )


class SQLAlchemyChatRepository(ChatRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def list_by_user(self, user_id: int) -> List[ChatMessage]:
        result = await self._session.execute(
            select(chat_messages_tbl)
            .where(chat_messages_tbl.c.user_id == user_id)
            .order_by(chat_messages_tbl.c.created_at.asc())
        )
        return [ChatMessage(**row._mapping) for row in result.fetchall()]

    async def create(self, user_id: int, sender: str, message: str) -> ChatMessage:
        stmt = (
            insert(chat_messages_tbl)
            .values(user_id=user_id, sender=sender, message=message, is_read=False)
            .returning(chat_messages_tbl)
        )
        result = await self._session.execute(stmt)
        return ChatMessage(**result.one()._mapping)

    async def list_participants(self) -> List[ChatParticipant]:
        chat = chat_messages_tbl
        last = (
            select(chat.c.user_id, func.max(chat.c.id).label("last_id"))
            .group_by(chat.c.user_id)
            .subquery()
        )
        unread = (
            select(chat.c.user_id, func.count().label("unread_count"))
            .where(chat.c.is_read.is_(False), chat.c.sender != ADMIN_SENDER)
            .group_by(chat.c.user_id)
            .subquery()
        )
        stmt = (
            select(
                last.c.user_id,
                users_tbl.c.name.label("user_name"),
                chat.c.message,
                chat.c.created_at,
                func.coalesce(unread.c.unread_count, 0).label("unread_count")
            )
            .select_from(
                last.join(chat, chat.c.id == last.c.last_id)
                .outerjoin(users_tbl, users_tbl.c.id == last.c.user_id)
                .outerjoin(unread, unread.c.user_id == last.c.user_id)
            )
            .order_by(chat.c.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [ChatParticipant(**row._mapping) for row in result.fetchall()]

    async def mark_as_read(self, user_id: int, sender: str) -> None:
        await self._session.execute(
            update(chat_messages_tbl)
            .where(chat_messages_tbl.c.user_id == user_id, chat_messages_tbl.c.sender == sender)
            .values(is_read=True)
        )
