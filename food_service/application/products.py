import logging
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional
from pydantic import BaseModel

from food_service.domain.models import Product
from food_service.domain.exceptions import InvalidInputError, ProductNotFoundError

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "All"


class ProductDTO(BaseModel):
    name: Optional[str] = None
    price: Optional[Any] = None
    description: Optional[str] = None
    image_path: Optional[str] = None
    category: Optional[str] = None

    def to_values(self) -> dict:
        if not self.name or self.price is None or self.price == "":
            raise InvalidInputError("Name and price are required")
        try:
            price = Decimal(str(self.price))
        except (InvalidOperation, ValueError):
            raise InvalidInputError(f"Invalid price: {self.price}")
        if not price.is_finite() or price < 0:
            raise InvalidInputError(f"Invalid price: {self.price}")
        return {
            "name": self.name,
            "price": price,
            "description": self.description or "",
            "image_path": self.image_path or "",
            "category": self.category or "Other"
        }


class ListProductsUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, category: Optional[str] = None, search: Optional[str] = None) -> List[Product]:
        if category == ALL_CATEGORIES:
            category = None
        search = search.strip() if search else None
        async with self._uow() as uow:
            products = await uow.products.list(category=category or None, search=search or None)
        logger.info(f"Found {len(products)} products (category={category}, search={search})")
        return products


class GetProductUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, product_id: int) -> Product:
        async with self._uow() as uow:
            product = await uow.products.get_by_id(product_id)
            if not product:
                raise ProductNotFoundError("Product not found")
            return product


class CreateProductUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, dto: ProductDTO) -> Product:
        values = dto.to_values()
        async with self._uow() as uow:
            product = await uow.products.create(values)
            await uow.commit()
        logger.info(f"Product created: {product.id}")
        return product


class UpdateProductUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, product_id: int, dto: ProductDTO) -> Product:
        values = dto.to_values()
        async with self._uow() as uow:
            product = await uow.products.update(product_id, values)
            if not product:
                raise ProductNotFoundError("Product not found")
            await uow.commit()
        return product


class DeleteProductUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, product_id: int) -> None:
        async with self._uow() as uow:
            if not await uow.products.delete(product_id):
                raise ProductNotFoundError("Product not found")
            await uow.commit()
        logger.info(f"Product deleted: {product_id}")
