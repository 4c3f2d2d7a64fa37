import logging
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from food_service.domain.exceptions import StorageError
from food_service.infrastructure.repositories import (
    SQLAlchemyUserRepository,
    SQLAlchemyProductRepository,
    SQLAlchemyOrderRepository,
    SQLAlchemyOrderItemRepository,
    SQLAlchemyNotificationRepository,
    SQLAlchemyChatRepository
)

logger = logging.getLogger(__name__)


class UnitOfWork:
    """Session scope for use cases.

    Every `commit()` is a durable step; whatever was not committed when the
    block exits is rolled back. Database errors leave the block as StorageError.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    @asynccontextmanager
    async def __call__(self):
        async with self._session_factory() as session:
            try:
                yield _UnitOfWorkImpl(session)
                await session.rollback()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Database error: {e}")
                raise StorageError(str(e)) from e
            except Exception:
                await session.rollback()
                raise


class _UnitOfWorkImpl:
    def __init__(self, session: AsyncSession):
        self._session = session
        self.users = SQLAlchemyUserRepository(session)
        self.products = SQLAlchemyProductRepository(session)
        self.orders = SQLAlchemyOrderRepository(session)
        self.order_items = SQLAlchemyOrderItemRepository(session)
        self.notifications = SQLAlchemyNotificationRepository(session)
        self.chat = SQLAlchemyChatRepository(session)

    async def commit(self):
        await self._session.commit()

    async def rollback(self):
        await self._session.rollback()
