"""Maintenance sweeps over order_items.

Every sweep reads its candidates once, then writes each row in its own unit of
work. A row that fails to write is logged and counted in `failed`; the sweep
goes on. Running a sweep twice fixes nothing the second time.
"""
import logging
from typing import Tuple

from food_service.domain.models import OrderStatus, Product, SweepReport
from food_service.domain.exceptions import InvalidInputError, StorageError
from food_service.domain.order_lifecycle import resolve_display_name

logger = logging.getLogger(__name__)

AUDIT_SAMPLE_SIZE = 50


async def _write_item(unit_of_work, item_id: int, values: dict) -> bool:
    try:
        async with unit_of_work() as uow:
            await uow.order_items.update(item_id, values)
            await uow.commit()
        return True
    except StorageError as e:
        logger.error(f"Could not update order item #{item_id}: {e}")
        return False


class BackfillItemNamesUseCase:
    """Names every unnamed item after its product, or the placeholder"""

    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, only_returning: bool = False) -> SweepReport:
        order_status = OrderStatus.RETURNING if only_returning else None
        async with self._uow() as uow:
            items = await uow.order_items.list_unnamed(order_status)
            names = await uow.products.names_by_id(item.product_id for item in items)

        report = SweepReport(scanned=len(items))
        for item in items:
            if item.product_id not in names:
                report.missing_products += 1
            name = resolve_display_name(None, names, item.product_id)
            if await _write_item(self._uow, item.id, {"name": name}):
                report.fixed += 1
                logger.info(f"Order item #{item.id} named '{name}'")
            else:
                report.failed += 1

        logger.info(f"Name backfill: scanned {report.scanned}, fixed {report.fixed}, failed {report.failed}")
        return report


class ReassignOrphanedItemsUseCase:
    """Points items of deleted products at the lowest-id product"""

    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self) -> Tuple[Product, SweepReport]:
        async with self._uow() as uow:
            default_product = await uow.products.get_first()
            if not default_product:
                raise InvalidInputError("No products found in the database")
            orphans = await uow.order_items.list_orphaned()

        logger.info(f"Using default product: {default_product.name} (ID: {default_product.id})")
        report = SweepReport(scanned=len(orphans), missing_products=len(orphans))
        values = {"product_id": default_product.id, "name": default_product.name}
        for item in orphans:
            if await _write_item(self._uow, item.id, values):
                report.fixed += 1
            else:
                report.failed += 1

        logger.info(f"Orphan reassignment: scanned {report.scanned}, fixed {report.fixed}, failed {report.failed}")
        return default_product, report


class AuditOrderItemsUseCase:
    """Counts items whose product is gone and names the unnamed ones"""

    def __init__(self, unit_of_work, sample_size: int = AUDIT_SAMPLE_SIZE):
        self._uow = unit_of_work
        self._sample_size = sample_size

    async def __call__(self) -> SweepReport:
        async with self._uow() as uow:
            items = await uow.order_items.sample_with_products(self._sample_size)

        report = SweepReport(scanned=len(items))
        for item in items:
            if item.product_name is None:
                report.missing_products += 1
                logger.warning(f"Order item #{item.id} has product_id {item.product_id} but no matching product")
            if item.name:
                continue
            lookup = {item.product_id: item.product_name} if item.product_name else {}
            name = resolve_display_name(None, lookup, item.product_id)
            if await _write_item(self._uow, item.id, {"name": name}):
                report.fixed += 1
            else:
                report.failed += 1

        logger.info(
            f"Audit: scanned {report.scanned}, missing products {report.missing_products}, fixed {report.fixed}"
        )
        return report
