import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.config import settings
from storefront.core.exceptions import NotFoundError, ValidationError
from storefront.models.orm.product_variant import ProductVariant
from storefront.repositories import product_repo, variant_repo

logger = logging.getLogger(__name__)


def _serialize_variant(variant: ProductVariant) -> dict:
    return {
        "id": variant.id,
        "product_id": variant.product_id,
        "size": variant.size,
        "color": variant.color,
        "stock": variant.stock,
        "sku": variant.sku,
        "available": variant.stock > 0,
    }


async def list_variants(db: AsyncSession, product_id: UUID) -> list[dict]:
    if not await product_repo.get_by_id(db, product_id):
        raise NotFoundError("Product not found")
    variants = await variant_repo.list_for_product(db, product_id)
    return [_serialize_variant(v) for v in variants]


async def get_variant_stock(
    db: AsyncSession, product_id: UUID, size: str, color: str
) -> dict:
    product = await product_repo.get_by_id(db, product_id)
    if not product:
        raise NotFoundError("Product not found")
    variant = await variant_repo.find_variant(db, product_id, size, color)
    if not variant:
        raise NotFoundError("Product variant not found")
    return {**_serialize_variant(variant), "product_name": product.name}


async def set_variant_stock(db: AsyncSession, variant_id: UUID, stock: int) -> dict:
    """Admin stock edit. Overwrites the shelf count; cart reservations are untouched."""
    if stock < 0:
        raise ValidationError("Stock cannot be negative")
    variant = await variant_repo.get_by_id(db, variant_id, for_update=True)
    if not variant:
        raise NotFoundError("Product variant not found")

    previous = variant.stock
    variant = await variant_repo.set_stock(db, variant, stock)
    logger.info("Stock for %s set from %d to %d", variant.sku, previous, stock)
    return _serialize_variant(variant)


async def list_low_stock(db: AsyncSession, threshold: int | None = None) -> list[dict]:
    if threshold is None:
        threshold = settings.low_stock_threshold
    if threshold < 0:
        raise ValidationError("Threshold cannot be negative")
    rows = await variant_repo.list_low_stock(db, threshold)
    return [
        {**_serialize_variant(variant), "product_name": product.name}
        for variant, product in rows
    ]


async def check_stock_availability(db: AsyncSession, items: list[dict]) -> dict:
    """Check requested quantities against shelf stock without reserving anything.

    Each item is a mapping with ``product_id``, ``size``, ``color`` and
    ``quantity``; items are checked independently, in the order given.
    """
    checks = []
    for item in items:
        check = {
            "product_id": item["product_id"],
            "size": item["size"],
            "color": item["color"],
            "requested_quantity": item["quantity"],
            "available_stock": None,
            "sku": None,
            "available": False,
            "error": None,
        }
        variant = await variant_repo.find_variant(
            db, item["product_id"], item["size"], item["color"]
        )
        if not variant:
            check["error"] = "Product variant not found"
        else:
            check["available_stock"] = variant.stock
            check["sku"] = variant.sku
            check["available"] = variant.stock >= item["quantity"]
            if not check["available"]:
                check["error"] = "Insufficient stock"
        checks.append(check)

    unavailable = [check for check in checks if not check["available"]]
    return {
        "all_items_available": not unavailable,
        "stock_checks": checks,
        "unavailable_items": unavailable,
    }
