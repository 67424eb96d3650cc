from datetime import datetime
from uuid import UUID

from sqlalchemy import and_, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.models.orm.cart_item import CartItem
from storefront.models.orm.product import Product
from storefront.models.orm.product_variant import ProductVariant


async def find(
    db: AsyncSession, user_id: UUID, product_id: UUID, size: str, color: str
) -> CartItem | None:
    result = await db.execute(
        select(CartItem).where(
            CartItem.user_id == user_id,
            CartItem.product_id == product_id,
            CartItem.size == size,
            CartItem.color == color,
        ).with_for_update()
    )
    return result.scalar_one_or_none()


async def get_by_id(
    db: AsyncSession, cart_item_id: UUID, *, for_update: bool = False
) -> CartItem | None:
    stmt = select(CartItem).where(CartItem.id == cart_item_id)
    if for_update:
        # Re-read under the lock rather than trusting the identity map copy.
        stmt = stmt.with_for_update().execution_options(populate_existing=True)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def create(
    db: AsyncSession,
    *,
    user_id: UUID,
    product_id: UUID,
    size: str,
    color: str,
    quantity: int,
) -> CartItem:
    cart_item = CartItem(
        user_id=user_id,
        product_id=product_id,
        size=size,
        color=color,
        quantity=quantity,
    )
    db.add(cart_item)
    await db.flush()
    return cart_item


async def update_quantity(db: AsyncSession, cart_item: CartItem, quantity: int) -> CartItem:
    cart_item.quantity = quantity
    await db.flush()
    return cart_item


async def delete_item(db: AsyncSession, cart_item: CartItem) -> None:
    await db.delete(cart_item)
    await db.flush()


async def delete_for_user(
    db: AsyncSession, user_id: UUID, *, only_ids: list[UUID] | None = None
) -> int:
    stmt = delete(CartItem).where(CartItem.user_id == user_id)
    if only_ids is not None:
        stmt = stmt.where(CartItem.id.in_(only_ids))
    result = await db.execute(stmt)
    return result.rowcount


async def list_for_user(
    db: AsyncSession, user_id: UUID
) -> list[tuple[CartItem, Product, ProductVariant | None]]:
    """Cart lines newest first, with their product and (if it still exists) variant."""
    stmt = (
        select(CartItem, Product, ProductVariant)
        .join(Product, CartItem.product_id == Product.id)
        .outerjoin(
            ProductVariant,
            and_(
                ProductVariant.product_id == CartItem.product_id,
                ProductVariant.size == CartItem.size,
                ProductVariant.color == CartItem.color,
            ),
        )
        .where(CartItem.user_id == user_id)
        .order_by(CartItem.created_at.desc())
    )
    result = await db.execute(stmt)
    return [(item, product, variant) for item, product, variant in result.all()]


async def count_quantity(db: AsyncSession, user_id: UUID) -> int:
    result = await db.execute(
        select(func.coalesce(func.sum(CartItem.quantity), 0)).where(
            CartItem.user_id == user_id
        )
    )
    return result.scalar() or 0


async def list_stale(db: AsyncSession, cutoff: datetime) -> list[CartItem]:
    result = await db.execute(
        select(CartItem)
        .where(CartItem.created_at < cutoff)
        .order_by(CartItem.user_id)
    )
    return list(result.scalars().all())
