"""Cart reservation engine.

Adding a variant to the cart takes the quantity off the variant's shelf stock;
reducing, removing or clearing lines puts it back. For every variant,
``stock + sum(cart quantities)`` is constant across these operations.

All functions run inside the caller's session. The request-scoped session
dependency commits on success and rolls back on any exception, so each call
here is applied completely or not at all.
"""
import logging
from datetime import datetime, timedelta, timezone
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.config import settings
from storefront.core.exceptions import InsufficientStockError, NotFoundError, ValidationError
from storefront.models.orm.cart_item import CartItem
from storefront.models.orm.product import Product
from storefront.models.orm.product_variant import ProductVariant
from storefront.repositories import cart_repo, product_repo, user_repo, variant_repo

logger = logging.getLogger(__name__)


def _serialize_line(
    cart_item: CartItem, product: Product, variant: ProductVariant | None
) -> dict:
    return {
        "id": cart_item.id,
        "product_id": product.id,
        "product_name": product.name,
        "price_cents": product.price_cents,
        "image_url": product.image_url,
        "size": cart_item.size,
        "color": cart_item.color,
        "quantity": cart_item.quantity,
        "line_total_cents": product.price_cents * cart_item.quantity,
        "sku": variant.sku if variant else None,
        "current_stock": variant.stock if variant else 0,
        "is_available": variant is not None,
    }


async def _reserve(db: AsyncSession, variant: ProductVariant, quantity: int) -> None:
    if variant.stock < quantity:
        logger.warning(
            "Reservation rejected for variant %s: requested %d, available %d",
            variant.sku, quantity, variant.stock,
        )
        raise InsufficientStockError(quantity, variant.stock)
    new_stock = await variant_repo.decrement_stock(db, variant.id, quantity)
    if new_stock is None:
        # Another transaction took the stock between our read and write.
        logger.warning("Reservation lost race for variant %s", variant.sku)
        raise InsufficientStockError(quantity, variant.stock)
    variant.stock = new_stock


async def _release(db: AsyncSession, variant: ProductVariant, quantity: int) -> None:
    variant.stock = await variant_repo.increment_stock(db, variant.id, quantity)


async def _get_line_variant(db: AsyncSession, cart_item: CartItem) -> ProductVariant:
    variant = await variant_repo.find_variant(
        db, cart_item.product_id, cart_item.size, cart_item.color, for_update=True
    )
    if not variant:
        raise NotFoundError("Product variant not found")
    return variant


def _variant_key(cart_item: CartItem) -> tuple:
    return (cart_item.product_id, cart_item.size, cart_item.color)


async def _lock_line(
    db: AsyncSession, user_id: UUID, cart_item_id: UUID
) -> tuple[CartItem, ProductVariant]:
    """Lock a user's cart line and its variant.

    The variant row is locked before the cart row, the same order add_to_cart
    uses, and the line is re-read once the lock is held.
    """
    cart_item = await cart_repo.get_by_id(db, cart_item_id)
    if not cart_item or cart_item.user_id != user_id:
        raise NotFoundError("Cart item not found")
    variant = await _get_line_variant(db, cart_item)
    cart_item = await cart_repo.get_by_id(db, cart_item_id, for_update=True)
    if not cart_item:
        raise NotFoundError("Cart item not found")
    return cart_item, variant


async def add_to_cart(
    db: AsyncSession,
    user_id: UUID,
    product_id: UUID,
    size: str,
    color: str,
    quantity: int = 1,
) -> dict:
    if quantity <= 0:
        raise ValidationError("Quantity must be greater than 0")

    if not await user_repo.get_by_id(db, user_id):
        raise NotFoundError("User not found")
    product = await product_repo.get_by_id(db, product_id)
    if not product:
        raise NotFoundError("Product not found")

    # Lock the variant before looking at the cart line so concurrent adds of
    # the same variant queue up behind each other.
    variant = await variant_repo.find_variant(db, product_id, size, color, for_update=True)
    if not variant:
        raise NotFoundError("Product variant not found")

    cart_item = await cart_repo.find(db, user_id, product_id, size, color)
    await _reserve(db, variant, quantity)

    if cart_item:
        cart_item = await cart_repo.update_quantity(db, cart_item, cart_item.quantity + quantity)
    else:
        cart_item = await cart_repo.create(
            db,
            user_id=user_id,
            product_id=product_id,
            size=size,
            color=color,
            quantity=quantity,
        )

    logger.info(
        "Reserved %d of %s for user %s (stock now %d)",
        quantity, variant.sku, user_id, variant.stock,
    )
    return _serialize_line(cart_item, product, variant)


async def update_cart_item(
    db: AsyncSession, user_id: UUID, cart_item_id: UUID, quantity: int
) -> dict:
    if quantity <= 0:
        raise ValidationError("Quantity must be greater than 0")

    cart_item, variant = await _lock_line(db, user_id, cart_item_id)
    product = await product_repo.get_by_id(db, cart_item.product_id)
    if not product:
        raise NotFoundError("Product not found")

    delta = quantity - cart_item.quantity
    if delta == 0:
        return _serialize_line(cart_item, product, variant)

    if delta > 0:
        await _reserve(db, variant, delta)
    else:
        await _release(db, variant, -delta)
    cart_item = await cart_repo.update_quantity(db, cart_item, quantity)

    logger.info(
        "Cart item %s quantity changed by %+d (stock now %d)",
        cart_item.id, delta, variant.stock,
    )
    return _serialize_line(cart_item, product, variant)


async def remove_from_cart(db: AsyncSession, user_id: UUID, cart_item_id: UUID) -> dict:
    cart_item, variant = await _lock_line(db, user_id, cart_item_id)
    product = await product_repo.get_by_id(db, cart_item.product_id)
    if not product:
        raise NotFoundError("Product not found")

    await _release(db, variant, cart_item.quantity)
    removed = _serialize_line(cart_item, product, variant)
    await cart_repo.delete_item(db, cart_item)

    logger.info(
        "Released %d of %s from cart item %s",
        cart_item.quantity, variant.sku, cart_item.id,
    )
    return removed


async def clear_cart(db: AsyncSession, user_id: UUID) -> int:
    """Empty the user's cart and return every reserved unit to stock.

    All variants are resolved and locked before anything is written, so a
    missing variant aborts the whole clear with nothing restored. Only the
    lines whose stock was restored are deleted.
    """
    rows = await cart_repo.list_for_user(db, user_id)
    # Variants are always locked in (product, size, color) order.
    listed_lines = sorted((row[0] for row in rows), key=_variant_key)

    locked: list[tuple[CartItem, ProductVariant]] = []
    for listed in listed_lines:
        variant = await _get_line_variant(db, listed)
        cart_item = await cart_repo.get_by_id(db, listed.id, for_update=True)
        if cart_item:
            locked.append((cart_item, variant))

    for cart_item, variant in locked:
        await _release(db, variant, cart_item.quantity)
    deleted = await cart_repo.delete_for_user(
        db, user_id, only_ids=[cart_item.id for cart_item, _ in locked]
    )

    logger.info("Cleared %d cart items for user %s", deleted, user_id)
    return deleted


async def get_cart(db: AsyncSession, user_id: UUID) -> list[dict]:
    rows = await cart_repo.list_for_user(db, user_id)
    return [_serialize_line(item, product, variant) for item, product, variant in rows]


async def get_cart_item_count(db: AsyncSession, user_id: UUID) -> int:
    return await cart_repo.count_quantity(db, user_id)


async def get_cart_total(db: AsyncSession, user_id: UUID) -> dict:
    """Read-only quote over every line; stock is already held so nothing is rechecked.

    Lines whose variant has since disappeared are listed under
    ``unavailable_items`` and left out of ``available_item_count``.
    """
    items = await get_cart(db, user_id)
    available = [item for item in items if item["is_available"]]
    return {
        "subtotal_cents": sum(item["line_total_cents"] for item in items),
        "total_item_count": sum(item["quantity"] for item in items),
        "available_item_count": sum(item["quantity"] for item in available),
        "available_items": available,
        "unavailable_items": [item for item in items if not item["is_available"]],
        "items": items,
    }


async def cleanup_stale_items(db: AsyncSession, stale_days: int | None = None) -> int:
    """Drop lines older than ``stale_days`` and put their stock back on the shelf."""
    if stale_days is None:
        stale_days = settings.cart_stale_days
    cutoff = datetime.now(timezone.utc) - timedelta(days=stale_days)

    count = 0
    stale = await cart_repo.list_stale(db, cutoff)
    for listed in sorted(stale, key=_variant_key):
        variant = await variant_repo.find_variant(
            db, listed.product_id, listed.size, listed.color, for_update=True
        )
        cart_item = await cart_repo.get_by_id(db, listed.id, for_update=True)
        if not cart_item:
            continue
        if variant:
            await _release(db, variant, cart_item.quantity)
        else:
            logger.warning("Stale cart item %s has no variant; nothing to restore", cart_item.id)
        await cart_repo.delete_item(db, cart_item)
        count += 1

    if count > 0:
        logger.info("Cleaned up %d stale cart items", count)
    return count
