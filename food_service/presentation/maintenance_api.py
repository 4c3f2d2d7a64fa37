from fastapi import APIRouter, Depends

from food_service.presentation.dependencies import provide
from food_service.presentation.errors import to_http_exception
from food_service.presentation.schemas import ErrorResponse, success
from food_service.application.repair_order_items import (
    AuditOrderItemsUseCase, BackfillItemNamesUseCase, ReassignOrphanedItemsUseCase
)
from food_service.domain.exceptions import DomainException

router = APIRouter(tags=["maintenance"])


@router.post("/admin/update-order-items")
async def backfill_item_names(
    use_case: BackfillItemNamesUseCase = Depends(provide(BackfillItemNamesUseCase))
):
    """Name every unnamed order item"""
    try:
        report = await use_case()
    except DomainException as e:
        raise to_http_exception(e)
    return success(message=f"Updated {report.fixed} order items with product names", data=report)


@router.get("/debug/fix-order-items")
async def backfill_returning_item_names(
    use_case: BackfillItemNamesUseCase = Depends(provide(BackfillItemNamesUseCase))
):
    """Name the unnamed items of orders awaiting a return decision"""
    try:
        report = await use_case(only_returning=True)
    except DomainException as e:
        raise to_http_exception(e)
    return success(message=f"Fixed {report.fixed} items in returning orders", data=report)


@router.post("/admin/fix-order-items-product-id", responses={400: {"model": ErrorResponse}})
async def reassign_orphaned_items(
    use_case: ReassignOrphanedItemsUseCase = Depends(provide(ReassignOrphanedItemsUseCase))
):
    try:
        default_product, report = await use_case()
    except DomainException as e:
        raise to_http_exception(e)
    return success(
        message=f"Updated {report.fixed} order items with valid product_id",
        data={"default_product": default_product, **report.model_dump()}
    )


@router.get("/debug/check-products")
async def audit_order_items(
    use_case: AuditOrderItemsUseCase = Depends(provide(AuditOrderItemsUseCase))
):
    try:
        report = await use_case()
    except DomainException as e:
        raise to_http_exception(e)
    return success(
        message=(
            f"Found {report.missing_products} order items with missing products. "
            f"Updated {report.fixed} items."
        ),
        data=report
    )
