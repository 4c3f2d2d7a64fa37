from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from food_service.domain.models import (
    ChatMessage, ChatParticipant, NewOrderItem, Notification, Order, OrderItem, OrderStatus, Product, User
)


class UserRepository(ABC):
    @abstractmethod
    async def get_by_id(self, user_id: int) -> Optional[User]:
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        pass

    @abstractmethod
    async def list(self) -> List[User]:
        pass

    @abstractmethod
    async def create(self, name: str, email: str, password: str, role: str) -> User:
        pass

    @abstractmethod
    async def update(self, user_id: int, values: dict) -> Optional[User]:
        pass

    @abstractmethod
    async def delete(self, user_id: int) -> bool:
        pass

    @abstractmethod
    async def count_by_role(self, role: str) -> int:
        pass

    @abstractmethod
    async def email_taken(self, email: str, exclude_user_id: Optional[int] = None) -> bool:
        pass


class ProductRepository(ABC):
    @abstractmethod
    async def get_by_id(self, product_id: int) -> Optional[Product]:
        pass

    @abstractmethod
    async def list(self, category: Optional[str] = None, search: Optional[str] = None) -> List[Product]:
        pass

    @abstractmethod
    async def create(self, values: dict) -> Product:
        pass

    @abstractmethod
    async def update(self, product_id: int, values: dict) -> Optional[Product]:
        pass

    @abstractmethod
    async def delete(self, product_id: int) -> bool:
        pass

    @abstractmethod
    async def get_first(self) -> Optional[Product]:
        """Product with the lowest id"""
        pass

    @abstractmethod
    async def names_by_id(self, product_ids: Iterable[int]) -> Dict[int, str]:
        pass


class OrderRepository(ABC):
    @abstractmethod
    async def get_by_id(self, order_id: int) -> Optional[Order]:
        pass

    @abstractmethod
    async def create(self, user_id: int, total_amount: Decimal, status: OrderStatus) -> Order:
        pass

    @abstractmethod
    async def update(self, order_id: int, values: dict) -> None:
        pass

    @abstractmethod
    async def list(self, user_id: Optional[int] = None, status: Optional[OrderStatus] = None) -> List[Order]:
        """Orders joined to their user's name, newest first"""
        pass

    @abstractmethod
    async def list_by_user(self, user_id: int) -> List[Order]:
        pass


class OrderItemRepository(ABC):
    @abstractmethod
    async def create(self, item: NewOrderItem) -> OrderItem:
        pass

    @abstractmethod
    async def list_by_order(self, order_id: int) -> List[OrderItem]:
        pass

    @abstractmethod
    async def list_with_products(self, order_ids: Iterable[int]) -> List[OrderItem]:
        """Items of the given orders with product_name/product_image joined in"""
        pass

    @abstractmethod
    async def list_unnamed(self, order_status: Optional[OrderStatus] = None) -> List[OrderItem]:
        pass

    @abstractmethod
    async def list_orphaned(self) -> List[OrderItem]:
        """Items whose product_id matches no product"""
        pass

    @abstractmethod
    async def sample_with_products(self, limit: int) -> List[OrderItem]:
        pass

    @abstractmethod
    async def update(self, item_id: int, values: dict) -> None:
        pass


class NotificationRepository(ABC):
    @abstractmethod
    async def create(self, user_id: int, title: str, message: str) -> Notification:
        pass

    @abstractmethod
    async def list_by_user(self, user_id: int) -> List[Notification]:
        pass

    @abstractmethod
    async def mark_as_read(self, notification_id: int) -> bool:
        pass

    @abstractmethod
    async def mark_all_as_read(self, user_id: int) -> None:
        pass


class ChatRepository(ABC):
    @abstractmethod
    async def list_by_user(self, user_id: int) -> List[ChatMessage]:
        pass

    @abstractmethod
    async def create(self, user_id: int, sender: str, message: str) -> ChatMessage:
        pass

    @abstractmethod
    async def list_participants(self) -> List[ChatParticipant]:
        pass

    @abstractmethod
    async def mark_as_read(self, user_id: int, sender: str) -> None:
        pass


class UnitOfWork(ABC):
    @property
    @abstractmethod
    def users(self) -> UserRepository:
        pass

    @property
    @abstractmethod
    def products(self) -> ProductRepository:
        pass

    @property
    @abstractmethod
    def orders(self) -> OrderRepository:
        pass

    @property
    @abstractmethod
    def order_items(self) -> OrderItemRepository:
        pass

    @property
    @abstractmethod
    def notifications(self) -> NotificationRepository:
        pass

    @property
    @abstractmethod
    def chat(self) -> ChatRepository:
        pass

    @abstractmethod
    async def __call__(self):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass


class PasswordHasher(ABC):
    @abstractmethod
    def hash(self, password: str) -> str:
        pass

    @abstractmethod
    def verify(self, password: str, hashed: str) -> bool:
        pass


class ObjectStorage(ABC):
    @abstractmethod
    async def upload(self, bucket: str, path: str, content: bytes, content_type: str) -> None:
        pass

    @abstractmethod
    def public_url(self, bucket: str, path: str) -> str:
        pass
