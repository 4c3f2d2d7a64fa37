"""
Shared fixtures: an in-memory unit of work implementing the repository
ports, fake password hashing and object storage, and a TestClient wired to
them through FastAPI dependency overrides.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

import pytest
from fastapi.testclient import TestClient

from food_service.application.interfaces import (
    ChatRepository, NotificationRepository, ObjectStorage, OrderItemRepository, OrderRepository, PasswordHasher,
    ProductRepository, UserRepository
)
from food_service.config import Settings
from food_service.domain.exceptions import StorageError
from food_service.domain.models import (
    ADMIN_SENDER, ChatMessage, ChatParticipant, NewOrderItem, Notification, Order, OrderItem, OrderStatus,
    Product, User
)
from food_service.main import create_app
from food_service.presentation.dependencies import get_object_storage, get_password_hasher, get_unit_of_work


BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class InMemoryDatabase:
    """Tables as dicts keyed by id. Writes are visible immediately."""

    def __init__(self):
        self.users: Dict[int, User] = {}
        self.products: Dict[int, Product] = {}
        self.orders: Dict[int, Order] = {}
        self.order_items: Dict[int, OrderItem] = {}
        self.notifications: Dict[int, Notification] = {}
        self.chat_messages: Dict[int, ChatMessage] = {}
        self.failures: Dict[str, Exception] = {}
        self.broken_item_ids = set()
        self._sequence = 0

    def next_id(self) -> int:
        self._sequence += 1
        return self._sequence

    def now(self) -> datetime:
        return BASE_TIME + timedelta(seconds=self._sequence)

    def check(self, operation: str) -> None:
        if operation in self.failures:
            raise self.failures[operation]

    # seeding helpers

    def add_user(self, name="Lan", email=None, password="hashed:secret", role="user") -> User:
        user_id = self.next_id()
        user = User(
            id=user_id, name=name, email=email or f"user{user_id}@example.com",
            password=password, role=role, created_at=self.now()
        )
        self.users[user_id] = user
        return user

    def add_product(self, name="Pho bo", price="45000", category="Noodles", image_path="") -> Product:
        product_id = self.next_id()
        product = Product(
            id=product_id, name=name, price=Decimal(price), category=category,
            image_path=image_path, created_at=self.now()
        )
        self.products[product_id] = product
        return product

    def add_order(self, user_id: int, status=OrderStatus.PENDING, total_amount="100000") -> Order:
        order_id = self.next_id()
        order = Order(
            id=order_id, user_id=user_id, total_amount=Decimal(total_amount), status=status,
            created_at=self.now()
        )
        self.orders[order_id] = order
        return order

    def add_item(self, order_id: int, product_id: Optional[int], name: Optional[str] = None,
                 quantity=1, price="0") -> OrderItem:
        item_id = self.next_id()
        item = OrderItem(
            id=item_id, order_id=order_id, product_id=product_id, name=name,
            quantity=quantity, price=Decimal(price)
        )
        self.order_items[item_id] = item
        return item

    def add_message(self, user_id: int, sender: str, message: str, is_read=False) -> ChatMessage:
        message_id = self.next_id()
        chat_message = ChatMessage(
            id=message_id, user_id=user_id, sender=sender, message=message,
            is_read=is_read, created_at=self.now()
        )
        self.chat_messages[message_id] = chat_message
        return chat_message


class InMemoryUserRepository(UserRepository):
    def __init__(self, db: InMemoryDatabase):
        self._db = db

    async def get_by_id(self, user_id: int) -> Optional[User]:
        self._db.check("users.get_by_id")
        return self._db.users.get(user_id)

    async def get_by_email(self, email: str) -> Optional[User]:
        return next((user for user in self._db.users.values() if user.email == email), None)

    async def list(self) -> List[User]:
        return sorted(self._db.users.values(), key=lambda user: (user.created_at, user.id), reverse=True)

    async def create(self, name: str, email: str, password: str, role: str) -> User:
        self._db.check("users.create")
        return self._db.add_user(name=name, email=email, password=password, role=role)

    async def update(self, user_id: int, values: dict) -> Optional[User]:
        self._db.check("users.update")
        user = self._db.users.get(user_id)
        if not user:
            return None
        updated = user.model_copy(update=values)
        self._db.users[user_id] = updated
        return updated

    async def delete(self, user_id: int) -> bool:
        return self._db.users.pop(user_id, None) is not None

    async def count_by_role(self, role: str) -> int:
        return sum(1 for user in self._db.users.values() if user.role == role)

    async def email_taken(self, email: str, exclude_user_id: Optional[int] = None) -> bool:
        return any(
            user.email == email and user.id != exclude_user_id
            for user in self._db.users.values()
        )


class InMemoryProductRepository(ProductRepository):
    def __init__(self, db: InMemoryDatabase):
        self._db = db

    async def get_by_id(self, product_id: int) -> Optional[Product]:
        self._db.check("products.get_by_id")
        return self._db.products.get(product_id)

    async def list(self, category: Optional[str] = None, search: Optional[str] = None) -> List[Product]:
        products = list(self._db.products.values())
        if category:
            products = [p for p in products if p.category == category]
        if search:
            products = [p for p in products if search.lower() in p.name.lower()]
        return sorted(products, key=lambda p: p.id, reverse=True)

    async def create(self, values: dict) -> Product:
        product_id = self._db.next_id()
        product = Product(id=product_id, created_at=self._db.now(), **values)
        self._db.products[product_id] = product
        return product

    async def update(self, product_id: int, values: dict) -> Optional[Product]:
        product = self._db.products.get(product_id)
        if not product:
            return None
        updated = product.model_copy(update=values)
        self._db.products[product_id] = updated
        return updated

    async def delete(self, product_id: int) -> bool:
        return self._db.products.pop(product_id, None) is not None

    async def get_first(self) -> Optional[Product]:
        if not self._db.products:
            return None
        return self._db.products[min(self._db.products)]

    async def names_by_id(self, product_ids: Iterable[int]) -> Dict[int, str]:
        return {
            product_id: self._db.products[product_id].name
            for product_id in product_ids
            if product_id in self._db.products
        }


class InMemoryOrderRepository(OrderRepository):
    def __init__(self, db: InMemoryDatabase):
        self._db = db

    async def get_by_id(self, order_id: int) -> Optional[Order]:
        self._db.check("orders.get_by_id")
        return self._db.orders.get(order_id)

    async def create(self, user_id: int, total_amount: Decimal, status: OrderStatus) -> Order:
        self._db.check("orders.create")
        return self._db.add_order(user_id, status=status, total_amount=str(total_amount))

    async def update(self, order_id: int, values: dict) -> None:
        self._db.check("orders.update")
        order = self._db.orders.get(order_id)
        if order:
            self._db.orders[order_id] = order.model_copy(update=values)

    async def list(self, user_id: Optional[int] = None, status: Optional[OrderStatus] = None) -> List[Order]:
        orders = []
        for order in sorted(self._db.orders.values(), key=lambda o: o.id, reverse=True):
            user = self._db.users.get(order.user_id)
            if not user:
                continue
            if user_id is not None and order.user_id != user_id:
                continue
            if status is not None and order.status != status:
                continue
            orders.append(order.model_copy(update={"user_name": user.name}))
        return orders

    async def list_by_user(self, user_id: int) -> List[Order]:
        orders = [order for order in self._db.orders.values() if order.user_id == user_id]
        return sorted(orders, key=lambda o: (o.created_at, o.id), reverse=True)


class InMemoryOrderItemRepository(OrderItemRepository):
    def __init__(self, db: InMemoryDatabase):
        self._db = db

    async def create(self, item: NewOrderItem) -> OrderItem:
        self._db.check("order_items.create")
        return self._db.add_item(
            item.order_id, item.product_id, name=item.name, quantity=item.quantity, price=str(item.price)
        )

    async def list_by_order(self, order_id: int) -> List[OrderItem]:
        return [item for item in self._sorted() if item.order_id == order_id]

    async def list_with_products(self, order_ids: Iterable[int]) -> List[OrderItem]:
        ids = set(order_ids)
        return [self._joined(item) for item in self._sorted() if item.order_id in ids]

    async def list_unnamed(self, order_status: Optional[OrderStatus] = None) -> List[OrderItem]:
        items = [item for item in self._sorted() if not item.name]
        if order_status is not None:
            items = [
                item for item in items
                if item.order_id in self._db.orders and self._db.orders[item.order_id].status == order_status
            ]
        return items

    async def list_orphaned(self) -> List[OrderItem]:
        return [item for item in self._sorted() if item.product_id not in self._db.products]

    async def sample_with_products(self, limit: int) -> List[OrderItem]:
        return [self._joined(item) for item in self._sorted()[:limit]]

    async def update(self, item_id: int, values: dict) -> None:
        if item_id in self._db.broken_item_ids:
            raise StorageError(f"could not update order item {item_id}")
        item = self._db.order_items.get(item_id)
        if item:
            self._db.order_items[item_id] = item.model_copy(update=values)

    def _sorted(self) -> List[OrderItem]:
        return sorted(self._db.order_items.values(), key=lambda item: item.id)

    def _joined(self, item: OrderItem) -> OrderItem:
        product = self._db.products.get(item.product_id)
        if not product:
            return item
        return item.model_copy(update={"product_name": product.name, "product_image": product.image_path})


class InMemoryNotificationRepository(NotificationRepository):
    def __init__(self, db: InMemoryDatabase):
        self._db = db

    async def create(self, user_id: int, title: str, message: str) -> Notification:
        self._db.check("notifications.create")
        notification_id = self._db.next_id()
        notification = Notification(
            id=notification_id, user_id=user_id, title=title, message=message,
            is_read=False, created_at=self._db.now()
        )
        self._db.notifications[notification_id] = notification
        return notification

    async def list_by_user(self, user_id: int) -> List[Notification]:
        notifications = [n for n in self._db.notifications.values() if n.user_id == user_id]
        return sorted(notifications, key=lambda n: (n.created_at, n.id), reverse=True)

    async def mark_as_read(self, notification_id: int) -> bool:
        notification = self._db.notifications.get(notification_id)
        if not notification:
            return False
        self._db.notifications[notification_id] = notification.model_copy(update={"is_read": True})
        return True

    async def mark_all_as_read(self, user_id: int) -> None:
        for notification_id, notification in list(self._db.notifications.items()):
            if notification.user_id == user_id:
                self._db.notifications[notification_id] = notification.model_copy(update={"is_read": True})


class InMemoryChatRepository(ChatRepository):
    def __init__(self, db: InMemoryDatabase):
        self._db = db

    async def list_by_user(self, user_id: int) -> List[ChatMessage]:
        messages = [m for m in self._db.chat_messages.values() if m.user_id == user_id]
        return sorted(messages, key=lambda m: (m.created_at, m.id))

    async def create(self, user_id: int, sender: str, message: str) -> ChatMessage:
        return self._db.add_message(user_id, sender, message)

    async def list_participants(self) -> List[ChatParticipant]:
        by_user: Dict[int, List[ChatMessage]] = {}
        for message in sorted(self._db.chat_messages.values(), key=lambda m: m.id):
            by_user.setdefault(message.user_id, []).append(message)

        participants = []
        for user_id, messages in by_user.items():
            last = messages[-1]
            user = self._db.users.get(user_id)
            participants.append(ChatParticipant(
                user_id=user_id,
                user_name=user.name if user else None,
                message=last.message,
                created_at=last.created_at,
                unread_count=sum(1 for m in messages if not m.is_read and m.sender != ADMIN_SENDER)
            ))
        return sorted(participants, key=lambda p: p.created_at, reverse=True)

    async def mark_as_read(self, user_id: int, sender: str) -> None:
        for message_id, message in list(self._db.chat_messages.items()):
            if message.user_id == user_id and message.sender == sender:
                self._db.chat_messages[message_id] = message.model_copy(update={"is_read": True})


class FakeUnitOfWork:
    def __init__(self, db: InMemoryDatabase):
        self.db = db
        self.commits = 0
        self.users = InMemoryUserRepository(db)
        self.products = InMemoryProductRepository(db)
        self.orders = InMemoryOrderRepository(db)
        self.order_items = InMemoryOrderItemRepository(db)
        self.notifications = InMemoryNotificationRepository(db)
        self.chat = InMemoryChatRepository(db)

    @asynccontextmanager
    async def __call__(self):
        yield self

    async def commit(self):
        self.commits += 1

    async def rollback(self):
        pass


class FakePasswordHasher(PasswordHasher):
    def hash(self, password: str) -> str:
        return f"hashed:{password}"

    def verify(self, password: str, hashed: str) -> bool:
        return hashed == f"hashed:{password}"


class FakeObjectStorage(ObjectStorage):
    def __init__(self):
        self.uploads = []
        self.error: Optional[Exception] = None

    async def upload(self, bucket: str, path: str, content: bytes, content_type: str) -> None:
        if self.error:
            raise self.error
        self.uploads.append((bucket, path, content, content_type))

    def public_url(self, bucket: str, path: str) -> str:
        return f"https://storage.test/{bucket}/{path}"


@pytest.fixture
def db() -> InMemoryDatabase:
    return InMemoryDatabase()


@pytest.fixture
def uow(db: InMemoryDatabase) -> FakeUnitOfWork:
    return FakeUnitOfWork(db)


@pytest.fixture
def hasher() -> FakePasswordHasher:
    return FakePasswordHasher()


@pytest.fixture
def storage() -> FakeObjectStorage:
    return FakeObjectStorage()


@pytest.fixture
def settings(tmp_path) -> Settings:
    settings = Settings()
    settings.UPLOAD_DIR = str(tmp_path / "uploads")
    settings.MAX_UPLOAD_BYTES = 1024
    return settings


@pytest.fixture
def client(uow, hasher, storage, settings) -> TestClient:
    """TestClient without lifespan: no database engine is created"""
    app = create_app(settings)
    app.dependency_overrides[get_unit_of_work] = lambda: uow
    app.dependency_overrides[get_password_hasher] = lambda: hasher
    app.dependency_overrides[get_object_storage] = lambda: storage
    return TestClient(app)
