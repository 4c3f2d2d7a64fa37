from typing import Optional
from fastapi import APIRouter, Depends, status

from food_service.presentation.dependencies import provide
from food_service.presentation.errors import to_http_exception
from food_service.presentation.schemas import ErrorResponse, ProductRequest, success
from food_service.application.products import (
    CreateProductUseCase, DeleteProductUseCase, GetProductUseCase, ListProductsUseCase, ProductDTO,
    UpdateProductUseCase
)
from food_service.domain.exceptions import DomainException

router = APIRouter(tags=["products"])


@router.get("/products")
async def list_products(
    category: Optional[str] = None,
    search: Optional[str] = None,
    use_case: ListProductsUseCase = Depends(provide(ListProductsUseCase))
):
    try:
        products = await use_case(category=category, search=search)
    except DomainException as e:
        raise to_http_exception(e)
    return success(data=products)


@router.get("/products/{product_id}", responses={404: {"model": ErrorResponse}})
async def get_product(product_id: int, use_case: GetProductUseCase = Depends(provide(GetProductUseCase))):
    try:
        product = await use_case(product_id)
    except DomainException as e:
        raise to_http_exception(e)
    return success(data=product)


@router.post("/products", responses={400: {"model": ErrorResponse}}, status_code=status.HTTP_201_CREATED)
async def create_product(
    request: ProductRequest,
    use_case: CreateProductUseCase = Depends(provide(CreateProductUseCase))
):
    try:
        product = await use_case(ProductDTO(**request.model_dump()))
    except DomainException as e:
        raise to_http_exception(e)
    return success(message="Product created successfully", data=product)


@router.put("/products/{product_id}", responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}})
async def update_product(
    product_id: int,
    request: ProductRequest,
    use_case: UpdateProductUseCase = Depends(provide(UpdateProductUseCase))
):
    try:
        product = await use_case(product_id, ProductDTO(**request.model_dump()))
    except DomainException as e:
        raise to_http_exception(e)
    return success(message="Product updated successfully", data=product)


@router.delete("/products/{product_id}", responses={404: {"model": ErrorResponse}})
async def delete_product(
    product_id: int,
    use_case: DeleteProductUseCase = Depends(provide(DeleteProductUseCase))
):
    try:
        await use_case(product_id)
    except DomainException as e:
        raise to_http_exception(e)
    return success(message="Product deleted successfully", data={"id": product_id})
